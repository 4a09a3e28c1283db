# audio_emotion/features.py
"""
Time-domain descriptors of a decoded mono buffer.

Every function here is total: buffers shorter than a window, empty buffers
and all-zero buffers produce finite defaults (0.0; silence_ratio of an empty
buffer is 1.0) instead of raising or propagating NaN.

Windowing matches the descriptors stored with earlier recordings:
non-overlapping windows of size W start at 0, W, 2W, ... while
``start < n - W``, so a trailing window that ends exactly at the buffer end
is not analyzed.

Naming note: ``spectral_centroid_proxy``, ``low_energy_proxy`` and
``high_energy_proxy`` are heuristics over raw sample indices and positions,
not frequency-domain measures. A true spectral feature would be added next
to them, never swapped in.
"""

from __future__ import annotations

import math

import numpy as np

from common.types import FeatureVector, SampleBuffer

ENERGY_WINDOW = 1024
PITCH_WINDOW = 1024
PITCH_MIN_LAG = 20
CENTROID_SIZE = 2048
EDGE_WINDOW = 512
STABILITY_WINDOW = 2048
TEMPO_WINDOW_SECONDS = 0.1
BREATH_WINDOW_SECONDS = 0.5

SILENCE_THRESHOLD = 0.01
BREATH_THRESHOLD = 0.005
TEMPO_PEAK_FACTOR = 1.5
HIGH_ENERGY_START = 0.6


def smallest_window(sample_rate: int) -> int:
    """Size in samples of the shortest analysis window at this sample rate."""
    return min(
        EDGE_WINDOW,
        ENERGY_WINDOW,
        STABILITY_WINDOW,
        int(sample_rate * TEMPO_WINDOW_SECONDS),
        int(sample_rate * BREATH_WINDOW_SECONDS),
    )


def frames(x: np.ndarray, size: int) -> np.ndarray:
    """Non-overlapping windows as a (count, size) view; count may be 0."""
    if size <= 0:
        return np.empty((0, 0), dtype=x.dtype)
    count = len(range(0, x.size - size, size))
    return x[: count * size].reshape(count, size)


def _pstdev(values: np.ndarray) -> float:
    return float(np.std(values)) if values.size else 0.0


# -------------------------------------------------------------------------
# Individual descriptors
# -------------------------------------------------------------------------

def average_amplitude(x: np.ndarray) -> float:
    return float(np.mean(np.abs(x))) if x.size else 0.0


def energy_variance(x: np.ndarray) -> float:
    """Std deviation of per-window mean-square energy (needs >= 2 windows)."""
    energies = np.mean(np.square(frames(x, ENERGY_WINDOW)), axis=1)
    if energies.size < 2:
        return 0.0
    return _pstdev(energies)


def zero_crossing_rate(x: np.ndarray) -> float:
    """Fraction of adjacent sample pairs whose sign differs (0 counts as positive)."""
    if x.size < 2:
        return 0.0
    positive = x >= 0
    return float(np.count_nonzero(positive[1:] != positive[:-1])) / (x.size - 1)


def spectral_centroid_proxy(x: np.ndarray, sample_rate: int) -> float:
    """
    Magnitude-weighted mean of ``i * sr / (2 * 2048)`` over the first 2048
    samples. The sample index stands in for a frequency bin; this is a
    time-domain heuristic, not a spectral centroid.
    """
    head = np.abs(x[:CENTROID_SIZE])
    total = float(np.sum(head))
    if total <= 0.0:
        return 0.0
    freqs = np.arange(head.size) * sample_rate / (2.0 * CENTROID_SIZE)
    return float(np.dot(freqs, head)) / total


def tempo_estimate(x: np.ndarray, sample_rate: int) -> float:
    """Energy peaks per minute over 100 ms windows."""
    energies = np.sum(np.square(frames(x, int(sample_rate * TEMPO_WINDOW_SECONDS))), axis=1)
    if energies.size == 0:
        return 0.0
    threshold = float(np.mean(energies)) * TEMPO_PEAK_FACTOR
    mid = energies[1:-1]
    peaks = (mid > threshold) & (mid > energies[:-2]) & (mid > energies[2:])
    minutes = x.size / float(sample_rate) / 60.0
    return float(np.count_nonzero(peaks)) / minutes


def dominant_period(window: np.ndarray) -> int:
    """
    Lag in [20, len/2) with the largest strictly positive autocorrelation;
    the first such lag wins ties. Returns 0 when no lag correlates positively.
    """
    n = window.size
    max_lag = math.ceil(n / 2)
    if max_lag <= PITCH_MIN_LAG:
        return 0
    corr = np.correlate(window, window, mode="full")[n - 1:]
    candidates = corr[PITCH_MIN_LAG:max_lag]
    best = int(np.argmax(candidates))
    if candidates[best] <= 0.0:
        return 0
    return best + PITCH_MIN_LAG


def pitch_variation(x: np.ndarray, sample_rate: int) -> float:
    """Coefficient of variation of per-window pitch estimates (sr / period)."""
    pitches = []
    for window in frames(x, PITCH_WINDOW):
        period = dominant_period(window)
        if period > 0:
            pitches.append(sample_rate / period)
    if len(pitches) < 2:
        return 0.0
    values = np.asarray(pitches)
    return _pstdev(values) / float(np.mean(values))


def silence_ratio(x: np.ndarray) -> float:
    """Fraction of samples under the silence threshold; an empty buffer is all silence."""
    if not x.size:
        return 1.0
    return float(np.count_nonzero(np.abs(x) < SILENCE_THRESHOLD)) / x.size


def low_energy_proxy(x: np.ndarray) -> float:
    """Sum of squares over the first 512 samples divided by 512, even when shorter."""
    return float(np.sum(np.square(x[:EDGE_WINDOW]))) / EDGE_WINDOW


def high_energy_proxy(x: np.ndarray) -> float:
    """Mean square over the 512 samples starting at 60% of the buffer."""
    start = int(math.floor(x.size * HIGH_ENERGY_START))
    segment = x[start:start + EDGE_WINDOW]
    if not segment.size:
        return 0.0
    return float(np.mean(np.square(segment)))


def voice_stability(x: np.ndarray) -> float:
    """Mean of 1 / (1 + 10 * std(|x|)) over 2048-sample windows."""
    windows = frames(x, STABILITY_WINDOW)
    if not windows.shape[0]:
        return 0.0
    spread = np.std(np.abs(windows), axis=1)
    return float(np.mean(1.0 / (1.0 + spread * 10.0)))


def breathing_irregularity(x: np.ndarray, sample_rate: int) -> float:
    """Std deviation of the very-quiet fraction across 500 ms windows."""
    windows = frames(x, int(sample_rate * BREATH_WINDOW_SECONDS))
    if windows.shape[0] < 2:
        return 0.0
    quiet = np.mean(np.abs(windows) < BREATH_THRESHOLD, axis=1)
    return _pstdev(quiet)


# -------------------------------------------------------------------------
# Full vector
# -------------------------------------------------------------------------

def extract_features(buffer: SampleBuffer) -> FeatureVector:
    x = buffer.samples
    sr = buffer.sample_rate
    return FeatureVector(
        average_amplitude=average_amplitude(x),
        energy_variance=energy_variance(x),
        zero_crossing_rate=zero_crossing_rate(x),
        spectral_centroid_proxy=spectral_centroid_proxy(x, sr),
        tempo_estimate=tempo_estimate(x, sr),
        pitch_variation=pitch_variation(x, sr),
        silence_ratio=silence_ratio(x),
        low_energy_proxy=low_energy_proxy(x),
        high_energy_proxy=high_energy_proxy(x),
        voice_stability=voice_stability(x),
        breathing_irregularity=breathing_irregularity(x, sr),
        duration_seconds=x.size / float(sr),
    )
