# audio_emotion/model.py
"""
Tone inference engine: SampleBuffer -> EmotionResult.

Pipeline: extract features -> normalize -> input guards -> score the
16 candidates (weighted sum x jitter) -> argmax with Neutral fallback ->
intensity calibration.

Each call is pure and synchronous: it reads one immutable buffer, builds
its own jitter source and keeps nothing between calls, so analyses can run
concurrently on worker threads without locking.
"""

from __future__ import annotations

from typing import Optional

from common.types import AnalysisReport, EmotionResult, SampleBuffer, NEUTRAL
from config.settings import SETTINGS, Settings

from .candidates import score_candidates
from .classifier import INTENSITY_MIN, calibrate_intensity, degenerate_reason, select_tone
from .decode import decode_audio
from .features import extract_features
from .jitter import JitterSource, UniformJitter
from .normalizer import normalize


def default_jitter(settings: Settings = SETTINGS) -> JitterSource:
    """Seeded from config when a seed is set, otherwise from the clock."""
    cfg = settings.jitter
    if cfg.seed is not None:
        return UniformJitter(cfg.low, cfg.high, seed=cfg.seed)
    return UniformJitter.from_time(cfg.low, cfg.high)


def analyze_detailed(
    buffer: SampleBuffer,
    jitter: Optional[JitterSource] = None,
    settings: Settings = SETTINGS,
) -> AnalysisReport:
    """
    Full analysis with its explanation: raw and normalized features, the
    jittered score of every candidate and the guard that fired, if any.
    """
    if jitter is None:
        jitter = default_jitter(settings)

    features = extract_features(buffer)
    normalized = normalize(features)

    guard = degenerate_reason(buffer, features, settings.classifier.silence_dominance)
    if guard is not None:
        return AnalysisReport(
            result=EmotionResult(tone=NEUTRAL, intensity=INTENSITY_MIN),
            features=features,
            normalized=normalized,
            guard=guard,
        )

    scores = score_candidates(normalized, jitter)
    tone, best = select_tone(scores, settings.classifier.neutral_score_floor)
    intensity = calibrate_intensity(best, jitter.draw())
    return AnalysisReport(
        result=EmotionResult(tone=tone, intensity=intensity),
        features=features,
        normalized=normalized,
        scores=scores,
    )


def analyze(
    buffer: SampleBuffer,
    jitter: Optional[JitterSource] = None,
    settings: Settings = SETTINGS,
) -> EmotionResult:
    return analyze_detailed(buffer, jitter, settings).result


def analyze_bytes(
    data: bytes,
    filename: Optional[str] = None,
    jitter: Optional[JitterSource] = None,
    decoder=decode_audio,
    settings: Settings = SETTINGS,
) -> EmotionResult:
    """Decode with ``decoder`` (raises DecodeError) and analyze the result."""
    return analyze(decoder(data, filename), jitter, settings)
