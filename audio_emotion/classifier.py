# audio_emotion/classifier.py
"""
Weighted-score argmax classification, degenerate-input guards and intensity
calibration.

Strategy: every candidate is scored and the maximum wins. A priority-ordered
gated cascade is deliberately not used; the only ordered rules here are the
input guards, which decide whether scoring runs at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from common.types import FeatureVector, SampleBuffer, NEUTRAL

from .features import smallest_window

INTENSITY_MIN = 0.5
INTENSITY_MAX = 1.0
DEFAULT_NEUTRAL_FLOOR = 1e-6
DEFAULT_SILENCE_DOMINANCE = 0.95


# -------------------------------------------------------------------------
# Input guards
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class GuardRule:
    reason: str
    predicate: Callable[[SampleBuffer, FeatureVector, float], bool]


def _is_empty(buffer: SampleBuffer, features: FeatureVector, dominance: float) -> bool:
    return len(buffer) == 0


def _is_too_short(buffer: SampleBuffer, features: FeatureVector, dominance: float) -> bool:
    return len(buffer) < smallest_window(buffer.sample_rate)


def _is_all_zero(buffer: SampleBuffer, features: FeatureVector, dominance: float) -> bool:
    return not buffer.samples.any()


def _is_silence_dominant(buffer: SampleBuffer, features: FeatureVector, dominance: float) -> bool:
    return features.silence_ratio >= dominance


# evaluated top to bottom; the first match short-circuits to Neutral
GUARD_RULES: Tuple[GuardRule, ...] = (
    GuardRule("empty", _is_empty),
    GuardRule("too_short", _is_too_short),
    GuardRule("all_zero", _is_all_zero),
    GuardRule("silence_dominant", _is_silence_dominant),
)


def degenerate_reason(
    buffer: SampleBuffer,
    features: FeatureVector,
    silence_dominance: float = DEFAULT_SILENCE_DOMINANCE,
) -> Optional[str]:
    for rule in GUARD_RULES:
        if rule.predicate(buffer, features, silence_dominance):
            return rule.reason
    return None


# -------------------------------------------------------------------------
# Selection and calibration
# -------------------------------------------------------------------------

def select_tone(scores: Dict[str, float], neutral_floor: float = DEFAULT_NEUTRAL_FLOOR) -> Tuple[str, float]:
    """
    Highest score wins; on ties the first tone in ``scores`` order (catalog
    order) is kept. A best score at or below ``neutral_floor`` yields Neutral.
    """
    best_tone, best_score = NEUTRAL, 0.0
    for tone, score in scores.items():
        if score > best_score:
            best_tone, best_score = tone, score
    if best_score <= neutral_floor:
        return NEUTRAL, 0.0
    return best_tone, best_score


def calibrate_intensity(best_score: float, jitter_value: float) -> float:
    return max(INTENSITY_MIN, min(INTENSITY_MAX, best_score * jitter_value))
