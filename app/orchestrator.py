# app/orchestrator.py
"""
Service-level entry point wrapping the pure engine: decode, analyze, log
and record metrics. CLI and HTTP surfaces both go through run_analysis().
"""
from typing import Any, Dict, Optional

from audio_emotion.decode import decode_audio
from audio_emotion.jitter import UniformJitter
from audio_emotion.model import analyze_detailed
from common.errors import DecodeError
from common.types import to_dict
from config.settings import SETTINGS
from utils.logging import get_logger
from utils.visuals import palette_for, particle_count

from utils.metrics import (
    timeit,
    inc_counter,
    decode_latency,
    analysis_latency,
    tones_total,
    degenerate_inputs_total,
    decode_errors_total,
)

logger = get_logger("pipeline")


def run_analysis(
    data: bytes,
    filename: Optional[str] = None,
    run_id: Optional[str] = None,
    *,
    seed: Optional[int] = None,
    explain: bool = False,
) -> Dict[str, Any]:
    """
    Analyze one encoded recording.

    - seed: pins the jitter source (reproducible tone/intensity).
    - explain: include features, normalized features and candidate scores.
    Raises DecodeError when the bytes cannot be decoded.
    """
    if run_id is None:
        run_id = SETTINGS.run_id
    metrics_labels = {"run_id": run_id}

    logger.info("run:start", extra={"extra_fields": {"run_id": run_id, "filename": filename, "bytes": len(data)}})

    try:
        with timeit(decode_latency, metrics_labels):
            buffer = decode_audio(data, filename)
    except DecodeError as exc:
        inc_counter(decode_errors_total, metrics_labels)
        logger.warning("run:decode_error", extra={"extra_fields": {"run_id": run_id, "error": str(exc)}})
        raise

    jitter = None
    if seed is not None:
        jitter = UniformJitter(SETTINGS.jitter.low, SETTINGS.jitter.high, seed=seed)

    with timeit(analysis_latency, metrics_labels):
        report = analyze_detailed(buffer, jitter)

    result = report.result
    inc_counter(tones_total, {"tone": result.tone, **metrics_labels})
    if report.guard is not None:
        inc_counter(degenerate_inputs_total, {"reason": report.guard, **metrics_labels})

    logger.info("analysis:result", extra={"extra_fields": {
        "run_id": run_id,
        "tone": result.tone,
        "intensity": result.intensity,
        "guard": report.guard,
        "duration_seconds": report.features.duration_seconds,
        "sample_rate": buffer.sample_rate,
    }})

    palette = palette_for(result.tone)
    out: Dict[str, Any] = {
        "run_id": run_id,
        "filename": filename,
        "tone": result.tone,
        "intensity": result.intensity,
        "description": palette.description,
        "color": palette.rgb,
        "particles": particle_count(result.tone, result.intensity),
        "guard": report.guard,
    }
    if explain:
        out["features"] = to_dict(report.features)
        out["normalized"] = to_dict(report.normalized)
        out["scores"] = dict(report.scores)
    return out
