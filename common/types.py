"""
common/types.py

Shared data structures of the tone inference engine:
- decoded audio (SampleBuffer)
- descriptors (FeatureVector, NormalizedFeatureVector)
- outputs (EmotionResult, AnalysisReport)

Implemented as dataclasses so they serialize, compare and log easily.
Every value is frozen once produced: downstream consumers (storage,
visualization) receive them as value types.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field, fields
from typing import Dict, Any, Optional

import numpy as np


NEUTRAL = "Neutral"

# Declared catalog order; ties in classification go to the earliest tone.
TONES = (
    "Joyful",
    "Excited",
    "Hopeful",
    "Grateful",
    "Peaceful",
    "Determined",
    "Nostalgic",
    "Contemplative",
    "Melancholic",
    "Sad",
    "Anxious",
    "Worried",
    "Angry",
    "Frustrated",
    "Confused",
    "Lonely",
)

ALL_TONES = TONES + (NEUTRAL,)


# -------------------------------------------------------------------------
# 🎙️ Decoded audio
# -------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class SampleBuffer:
    """
    Mono amplitude samples in [-1, 1] plus their sample rate.

    The array is copied, made read-only and sanitized on construction
    (non-finite values replaced, amplitudes clipped), so one buffer can be
    handed to a worker thread without further copies.
    """
    samples: np.ndarray
    sample_rate: int
    duration: Optional[float] = None  # nominal seconds, defaults to len/sr

    def __post_init__(self):
        arr = np.asarray(self.samples, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError(f"SampleBuffer expects mono (1-D) samples, got shape {arr.shape}")
        if int(self.sample_rate) <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        arr = np.clip(np.nan_to_num(arr, nan=0.0, posinf=1.0, neginf=-1.0), -1.0, 1.0)
        arr.setflags(write=False)
        object.__setattr__(self, "samples", arr)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))
        if self.duration is None:
            object.__setattr__(self, "duration", arr.size / float(self.sample_rate))

    def __len__(self) -> int:
        return int(self.samples.size)

    @classmethod
    def silence(cls, seconds: float, sample_rate: int = 44100) -> "SampleBuffer":
        return cls(np.zeros(int(seconds * sample_rate)), sample_rate)


# -------------------------------------------------------------------------
# 📈 Descriptors
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class FeatureVector:
    """Raw scalar descriptors computed from one SampleBuffer."""
    average_amplitude: float = 0.0
    energy_variance: float = 0.0
    zero_crossing_rate: float = 0.0
    spectral_centroid_proxy: float = 0.0
    tempo_estimate: float = 0.0
    pitch_variation: float = 0.0
    silence_ratio: float = 0.0
    low_energy_proxy: float = 0.0
    high_energy_proxy: float = 0.0
    voice_stability: float = 0.0
    breathing_irregularity: float = 0.0
    duration_seconds: float = 0.0


@dataclass(frozen=True)
class NormalizedFeatureVector(FeatureVector):
    """Same fields as FeatureVector, every value clamped to [0, 1]."""


FEATURE_NAMES = tuple(f.name for f in fields(FeatureVector))


# -------------------------------------------------------------------------
# 💬 Results
# -------------------------------------------------------------------------

@dataclass(frozen=True)
class EmotionResult:
    """
    Outcome of one analysis.

    - tone: one of TONES, or NEUTRAL when nothing activated
    - intensity: confidence-like magnitude in [0.5, 1.0]
    """
    tone: str
    intensity: float


@dataclass(frozen=True)
class AnalysisReport:
    """
    Explanation attached to an EmotionResult: what was measured, how each
    candidate scored, and which input guard (if any) short-circuited.
    """
    result: EmotionResult
    features: FeatureVector
    normalized: NormalizedFeatureVector
    scores: Dict[str, float] = field(default_factory=dict)
    guard: Optional[str] = None


# -------------------------------------------------------------------------
# 🧰 Serialization helper
# -------------------------------------------------------------------------

def to_dict(obj) -> Dict[str, Any]:
    """dataclasses.asdict() for the value types above (SampleBuffer excluded)."""
    return asdict(obj)
