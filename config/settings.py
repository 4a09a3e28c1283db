# config/settings.py
from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from common.errors import ConfigurationError

from .loader import DEFAULTS_PATH, LOCAL_OVERRIDE_PATH, load_settings_data


@dataclass(frozen=True)
class JitterConfig:
    low: float
    high: float
    seed: Optional[int]


@dataclass(frozen=True)
class ClassifierConfig:
    neutral_score_floor: float
    silence_dominance: float


@dataclass(frozen=True)
class LoggingConfig:
    level: str


@dataclass(frozen=True)
class MetricsConfig:
    port: int


@dataclass(frozen=True)
class ServerConfig:
    cors_allow_origins: List[str]
    max_upload_bytes: int


@dataclass(frozen=True)
class Settings:
    jitter: JitterConfig
    classifier: ClassifierConfig
    logging: LoggingConfig
    metrics: MetricsConfig
    server: ServerConfig
    run_id: str
    raw: Dict[str, Any]

    @property
    def metrics_port(self) -> int:
        return self.metrics.port

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.raw)


def _build_jitter(config: Dict[str, Any]) -> JitterConfig:
    data = config.get("jitter", {})
    low = float(data.get("low", 0.8))
    high = float(data.get("high", 1.2))
    if not 0.0 < low <= high:
        raise ConfigurationError(f"jitter bounds must satisfy 0 < low <= high, got {low}..{high}")
    seed = data.get("seed")
    return JitterConfig(low=low, high=high, seed=None if seed is None else int(seed))


def _build_classifier(config: Dict[str, Any]) -> ClassifierConfig:
    data = config.get("classifier", {})
    dominance = float(data.get("silence_dominance", 0.95))
    if not 0.0 < dominance <= 1.0:
        raise ConfigurationError(f"classifier.silence_dominance must be in (0, 1], got {dominance}")
    return ClassifierConfig(
        neutral_score_floor=float(data.get("neutral_score_floor", 1e-6)),
        silence_dominance=dominance,
    )


def _build_server(config: Dict[str, Any]) -> ServerConfig:
    data = config.get("server", {})
    origins = data.get("cors_allow_origins", "*")
    if isinstance(origins, str):
        origins = [o.strip() for o in origins.split(",") if o.strip()]
    return ServerConfig(
        cors_allow_origins=[str(o) for o in origins],
        max_upload_bytes=int(data.get("max_upload_bytes", 25 * 1024 * 1024)),
    )


def load_settings(
    defaults_path: Path = DEFAULTS_PATH,
    local_path: Path = LOCAL_OVERRIDE_PATH,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    raw_config = load_settings_data(defaults_path, local_path, environ)
    runtime = raw_config.get("runtime", {})
    return Settings(
        jitter=_build_jitter(raw_config),
        classifier=_build_classifier(raw_config),
        logging=LoggingConfig(level=str(raw_config.get("logging", {}).get("level", "INFO"))),
        metrics=MetricsConfig(port=int(raw_config.get("metrics", {}).get("port", 9000))),
        server=_build_server(raw_config),
        run_id=str(runtime.get("run_id")),
        raw=raw_config,
    )


SETTINGS = load_settings()
