# audio_emotion/jitter.py
"""
Injectable multiplier sources for candidate scores and intensity.

Jitter keeps near-identical recordings from collapsing onto one label.
Tests pin it with FixedJitter or a seeded UniformJitter; production builds a
time-seeded source per call so analyses share no state.
"""

from __future__ import annotations

import time
from typing import Optional, Protocol

import numpy as np

DEFAULT_LOW = 0.8
DEFAULT_HIGH = 1.2


class JitterSource(Protocol):
    def draw(self) -> float:
        ...


class FixedJitter:
    """Always returns the same multiplier (1.0 disables jitter)."""

    def __init__(self, value: float = 1.0):
        self.value = float(value)

    def draw(self) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"FixedJitter({self.value})"


class UniformJitter:
    """Uniform draws in [low, high) from a numpy Generator."""

    def __init__(self, low: float = DEFAULT_LOW, high: float = DEFAULT_HIGH, seed: Optional[int] = None):
        if not 0.0 < low <= high:
            raise ValueError(f"jitter bounds must satisfy 0 < low <= high, got {low}..{high}")
        self.low = float(low)
        self.high = float(high)
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_time(cls, low: float = DEFAULT_LOW, high: float = DEFAULT_HIGH) -> "UniformJitter":
        return cls(low, high, seed=time.time_ns())

    def draw(self) -> float:
        return float(self._rng.uniform(self.low, self.high))

    def __repr__(self) -> str:
        return f"UniformJitter({self.low}, {self.high}, seed={self.seed})"
