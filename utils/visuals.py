# utils/visuals.py
"""
Presentation catalog for downstream visualizers: tone -> color, description,
particle density. Data only; nothing here renders.
"""
import math
from dataclasses import dataclass
from typing import Dict

from common.types import NEUTRAL


@dataclass(frozen=True)
class TonePalette:
    rgb: str
    gradient_from: str
    gradient_to: str
    description: str
    particle_multiplier: float = 1.0


_PALETTES: Dict[str, TonePalette] = {
    # positive
    "Hopeful": TonePalette("59, 130, 246", "blue-400", "teal-400", "Radiating optimism and possibility"),
    "Joyful": TonePalette("251, 191, 36", "yellow-400", "orange-400", "Bursting with happiness and light", 1.3),
    "Excited": TonePalette("168, 85, 247", "purple-400", "pink-400", "Vibrating with anticipation and energy", 1.5),
    "Grateful": TonePalette("245, 158, 11", "amber-400", "orange-400", "Glowing with appreciation and warmth"),
    "Peaceful": TonePalette("34, 197, 94", "green-400", "teal-400", "Flowing with calm and serenity", 0.7),
    "Determined": TonePalette("99, 102, 241", "indigo-400", "purple-400", "Pulsing with resolve and strength"),
    # contemplative
    "Nostalgic": TonePalette("147, 51, 234", "purple-400", "pink-400", "Drifting through memories and time"),
    "Contemplative": TonePalette("156, 163, 175", "gray-400", "slate-400", "Reflecting in thoughtful silence"),
    "Melancholic": TonePalette("59, 130, 246", "blue-500", "indigo-500", "Touched by gentle, bittersweet beauty", 0.5),
    # challenging
    "Sad": TonePalette("37, 99, 235", "blue-600", "blue-700", "Carrying the weight of sorrow", 0.6),
    "Anxious": TonePalette("248, 113, 113", "red-400", "orange-400", "Trembling with nervous energy", 1.4),
    "Worried": TonePalette("234, 179, 8", "yellow-500", "orange-500", "Clouded with concern and care"),
    "Angry": TonePalette("239, 68, 68", "red-500", "red-600", "Burning with fierce intensity", 1.2),
    "Frustrated": TonePalette("249, 115, 22", "orange-500", "red-500", "Struggling against constraints"),
    "Confused": TonePalette("168, 85, 247", "purple-500", "indigo-500", "Searching through uncertainty"),
    "Lonely": TonePalette("59, 130, 246", "blue-500", "slate-500", "Yearning for connection"),
    NEUTRAL: TonePalette("156, 163, 175", "gray-400", "gray-500", "Resting in balanced calm"),
}

BASE_PARTICLES = 15


def palette_for(tone: str) -> TonePalette:
    """Unknown tones get the Neutral palette."""
    return _PALETTES.get(tone, _PALETTES[NEUTRAL])


def particle_count(tone: str, intensity: float) -> int:
    base = math.floor(intensity * BASE_PARTICLES)
    return int(math.floor(base * palette_for(tone).particle_multiplier))
