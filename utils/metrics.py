# utils/metrics.py
from prometheus_client import start_http_server, Counter, Histogram
from contextlib import contextmanager
import time
import threading

import logging
from typing import Mapping, Optional

from config.settings import SETTINGS

_logger = logging.getLogger("metrics")

_started = False
_lock = threading.Lock()

_METRIC_LABELS = ("run_id",)
_DEFAULT_LABELS = {"run_id": SETTINGS.run_id or "bootstrap"}

decode_latency = Histogram(
    "audio_decode_latency_seconds",
    "Latency of decoding encoded audio into samples",
    _METRIC_LABELS,
)
analysis_latency = Histogram(
    "tone_analysis_latency_seconds",
    "Latency of feature extraction and classification",
    _METRIC_LABELS,
)
tones_total = Counter(
    "tones_classified_total",
    "Analyses by resulting tone",
    ("tone", *_METRIC_LABELS),
)
degenerate_inputs_total = Counter(
    "degenerate_inputs_total",
    "Analyses short-circuited to Neutral, by guard reason",
    ("reason", *_METRIC_LABELS),
)
decode_errors_total = Counter(
    "decode_errors_total",
    "Inputs that could not be decoded",
    _METRIC_LABELS,
)


def init_metrics(port: Optional[int] = None):
    """Expose /metrics only once."""
    global _started
    if _started:
        return
    with _lock:
        if not _started:
            effective_port = port if port is not None else SETTINGS.metrics.port
            start_http_server(effective_port)
            _started = True
            decode_errors_total.labels(**_DEFAULT_LABELS).inc(0)
            _logger.info("metrics exposed on port %s", effective_port)


@contextmanager
def timeit(histogram, labels: Mapping[str, str]):
    """Record the duration of the block in the histogram with the provided labels."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def inc_counter(counter, labels: Mapping[str, str], amount: float = 1.0):
    counter.labels(**labels).inc(amount)
