# audio_emotion/normalizer.py
"""
Fixed scale-and-clamp calibration of raw descriptors into [0, 1].

The factors are part of the stored-result contract: changing one shifts
every tone ever computed, so tests pin them.
"""

from __future__ import annotations

from typing import Dict

from common.types import FeatureVector, NormalizedFeatureVector, FEATURE_NAMES

# raw value is multiplied by the factor, then clamped to [0, 1]
SCALE_FACTORS: Dict[str, float] = {
    "average_amplitude": 20.0,
    "energy_variance": 10.0,
    "zero_crossing_rate": 1.0 / 0.05,
    "spectral_centroid_proxy": 1.0 / 2000.0,
    "tempo_estimate": 1.0 / 100.0,
    "pitch_variation": 5.0,
    "silence_ratio": 1.0,           # already a ratio
    "low_energy_proxy": 10.0,
    "high_energy_proxy": 10.0,
    "voice_stability": 3.0,
    "breathing_irregularity": 1.0,  # already a ratio spread
    "duration_seconds": 1.0 / 30.0, # 30 s long-recording horizon
}


def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))


def normalize(features: FeatureVector) -> NormalizedFeatureVector:
    values = {
        name: clamp(getattr(features, name) * SCALE_FACTORS[name])
        for name in FEATURE_NAMES
    }
    return NormalizedFeatureVector(**values)
