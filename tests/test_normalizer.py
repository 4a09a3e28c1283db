# tests/test_normalizer.py
from dataclasses import astuple

import pytest

from audio_emotion.normalizer import SCALE_FACTORS, clamp, normalize
from common.types import FeatureVector, FEATURE_NAMES


def test_calibration_constants_are_pinned():
    assert SCALE_FACTORS["average_amplitude"] == 20.0
    assert SCALE_FACTORS["energy_variance"] == 10.0
    assert SCALE_FACTORS["zero_crossing_rate"] == pytest.approx(1 / 0.05)
    assert SCALE_FACTORS["spectral_centroid_proxy"] == pytest.approx(1 / 2000)
    assert SCALE_FACTORS["tempo_estimate"] == pytest.approx(1 / 100)
    assert SCALE_FACTORS["pitch_variation"] == 5.0
    assert SCALE_FACTORS["low_energy_proxy"] == 10.0
    assert SCALE_FACTORS["high_energy_proxy"] == 10.0
    assert SCALE_FACTORS["voice_stability"] == 3.0
    assert SCALE_FACTORS["silence_ratio"] == 1.0
    assert SCALE_FACTORS["breathing_irregularity"] == 1.0
    assert SCALE_FACTORS["duration_seconds"] == pytest.approx(1 / 30)
    assert set(SCALE_FACTORS) == set(FEATURE_NAMES)


def test_midpoints_map_to_half():
    nf = normalize(FeatureVector(
        average_amplitude=0.025,
        energy_variance=0.05,
        zero_crossing_rate=0.025,
        spectral_centroid_proxy=1000.0,
        tempo_estimate=50.0,
        pitch_variation=0.1,
        silence_ratio=0.5,
        low_energy_proxy=0.05,
        high_energy_proxy=0.05,
        voice_stability=0.5 / 3,
        breathing_irregularity=0.5,
        duration_seconds=15.0,
    ))
    for value in astuple(nf):
        assert value == pytest.approx(0.5)


def test_values_are_clamped():
    nf = normalize(FeatureVector(
        average_amplitude=0.9,
        spectral_centroid_proxy=11000.0,
        tempo_estimate=600.0,
        voice_stability=1.0,
        duration_seconds=120.0,
        energy_variance=-0.1,
    ))
    assert nf.average_amplitude == 1.0
    assert nf.spectral_centroid_proxy == 1.0
    assert nf.tempo_estimate == 1.0
    assert nf.voice_stability == 1.0
    assert nf.duration_seconds == 1.0
    assert nf.energy_variance == 0.0
    assert all(0.0 <= v <= 1.0 for v in astuple(nf))


def test_clamp_bounds():
    assert clamp(-3.0) == 0.0
    assert clamp(0.25) == 0.25
    assert clamp(7.0) == 1.0
