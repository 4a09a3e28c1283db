# audio_emotion/candidates.py
"""
Static catalog of candidate tones and their weighted-sum scoring.

Each candidate combines four shaped normalized features; weights sum to 1.0.
Shapes:
- "plain": the feature itself (higher value, higher score)
- "low":   max(0, pivot - x), rewards values under the pivot
- "near":  1 - |x - pivot|, rewards values close to the pivot
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple

from common.types import NormalizedFeatureVector, FEATURE_NAMES, TONES

SHAPES = ("plain", "low", "near")


@dataclass(frozen=True)
class Term:
    feature: str
    weight: float
    shape: str = "plain"
    pivot: float = 0.0

    def value(self, nf: NormalizedFeatureVector) -> float:
        x = getattr(nf, self.feature)
        if self.shape == "low":
            return max(0.0, self.pivot - x)
        if self.shape == "near":
            return 1.0 - abs(x - self.pivot)
        return x


@dataclass(frozen=True)
class EmotionCandidate:
    name: str
    terms: Tuple[Term, ...]

    def base_score(self, nf: NormalizedFeatureVector) -> float:
        """Weighted sum before jitter."""
        return sum(t.weight * t.value(nf) for t in self.terms)

    @property
    def primary_term(self) -> Term:
        """Heaviest plain term; earliest declared on ties."""
        plain = [t for t in self.terms if t.shape == "plain"]
        return max(plain, key=lambda t: t.weight)


def plain(feature: str, weight: float) -> Term:
    return Term(feature, weight)


def low(feature: str, weight: float, pivot: float) -> Term:
    return Term(feature, weight, "low", pivot)


def near(feature: str, weight: float, pivot: float) -> Term:
    return Term(feature, weight, "near", pivot)


AMP = "average_amplitude"
VAR = "energy_variance"
ZCR = "zero_crossing_rate"
CENTROID = "spectral_centroid_proxy"
TEMPO = "tempo_estimate"
PITCH = "pitch_variation"
SILENCE = "silence_ratio"
LOW_E = "low_energy_proxy"
HIGH_E = "high_energy_proxy"
STABILITY = "voice_stability"
BREATH = "breathing_irregularity"
DURATION = "duration_seconds"

CATALOG: Tuple[EmotionCandidate, ...] = (
    # positive
    EmotionCandidate("Joyful", (plain(AMP, 0.3), plain(TEMPO, 0.3), plain(HIGH_E, 0.2), plain(STABILITY, 0.2))),
    EmotionCandidate("Excited", (plain(AMP, 0.25), plain(TEMPO, 0.25), plain(VAR, 0.25), plain(PITCH, 0.25))),
    EmotionCandidate("Hopeful", (plain(AMP, 0.2), plain(CENTROID, 0.3), plain(STABILITY, 0.3), plain(HIGH_E, 0.2))),
    EmotionCandidate("Grateful", (plain(AMP, 0.25), plain(STABILITY, 0.35), plain(LOW_E, 0.2), low(SILENCE, 0.2, 0.5))),
    EmotionCandidate("Peaceful", (low(AMP, 0.3, 0.7), plain(STABILITY, 0.3), plain(SILENCE, 0.2), low(VAR, 0.2, 0.8))),
    EmotionCandidate("Determined", (plain(AMP, 0.25), plain(STABILITY, 0.35), plain(TEMPO, 0.2), plain(ZCR, 0.2))),
    # contemplative
    EmotionCandidate("Nostalgic", (near(AMP, 0.3, 0.5), low(TEMPO, 0.3, 0.6), plain(SILENCE, 0.2), plain(STABILITY, 0.2))),
    EmotionCandidate("Contemplative", (near(AMP, 0.25, 0.4), plain(SILENCE, 0.35), plain(STABILITY, 0.25), low(TEMPO, 0.15, 0.5))),
    EmotionCandidate("Melancholic", (low(AMP, 0.3, 0.6), low(TEMPO, 0.3, 0.5), plain(STABILITY, 0.2), plain(SILENCE, 0.2))),
    # challenging
    EmotionCandidate("Sad", (low(AMP, 0.3, 0.5), low(TEMPO, 0.3, 0.4), low(STABILITY, 0.2, 0.6), plain(SILENCE, 0.2))),
    EmotionCandidate("Anxious", (plain(VAR, 0.3), low(STABILITY, 0.3, 0.7), plain(BREATH, 0.2), plain(TEMPO, 0.2))),
    EmotionCandidate("Worried", (near(AMP, 0.25, 0.5), plain(PITCH, 0.25), low(STABILITY, 0.25, 0.6), plain(VAR, 0.25))),
    EmotionCandidate("Angry", (plain(AMP, 0.3), plain(VAR, 0.3), plain(TEMPO, 0.2), plain(LOW_E, 0.2))),
    EmotionCandidate("Frustrated", (plain(VAR, 0.3), plain(AMP, 0.25), low(STABILITY, 0.25, 0.6), plain(TEMPO, 0.2))),
    EmotionCandidate("Confused", (plain(VAR, 0.25), low(STABILITY, 0.25, 0.7), plain(SILENCE, 0.25), plain(PITCH, 0.25))),
    EmotionCandidate("Lonely", (low(AMP, 0.3, 0.5), low(TEMPO, 0.3, 0.4), plain(SILENCE, 0.2), plain(DURATION, 0.2))),
)


def validate_catalog(catalog: Tuple[EmotionCandidate, ...] = CATALOG) -> None:
    """Raise ValueError when the catalog breaks its structural rules."""
    names = [c.name for c in catalog]
    if tuple(names) != TONES:
        raise ValueError(f"catalog order {names} does not match declared tones")
    for c in catalog:
        if not 3 <= len(c.terms) <= 4:
            raise ValueError(f"{c.name}: expected 3-4 terms, got {len(c.terms)}")
        total = sum(t.weight for t in c.terms)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"{c.name}: weights sum to {total}, expected 1.0")
        for t in c.terms:
            if t.feature not in FEATURE_NAMES:
                raise ValueError(f"{c.name}: unknown feature {t.feature}")
            if t.shape not in SHAPES:
                raise ValueError(f"{c.name}: unknown shape {t.shape}")


validate_catalog()


def base_scores(nf: NormalizedFeatureVector) -> Dict[str, float]:
    return {c.name: c.base_score(nf) for c in CATALOG}


def score_candidates(nf: NormalizedFeatureVector, jitter) -> Dict[str, float]:
    """Jittered score per tone, drawing once per candidate in catalog order."""
    return {c.name: c.base_score(nf) * jitter.draw() for c in CATALOG}
