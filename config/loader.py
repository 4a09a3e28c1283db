from __future__ import annotations

import copy
import os
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from common.errors import ConfigurationError

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULTS_PATH = CONFIG_DIR / "defaults.yaml"
LOCAL_OVERRIDE_PATH = CONFIG_DIR / "local.yaml"


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursive merge; mappings merge key by key, anything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping at top level")
    return data


def _optional_int(raw: str) -> Optional[int]:
    return None if raw.strip().lower() in {"", "none", "null"} else int(raw)


# env var -> (config path, parser)
_ENV_MAP: Dict[str, Tuple[Tuple[str, ...], Callable[[str], Any]]] = {
    "TONE_JITTER_LOW": (("jitter", "low"), float),
    "TONE_JITTER_HIGH": (("jitter", "high"), float),
    "TONE_JITTER_SEED": (("jitter", "seed"), _optional_int),
    "TONE_NEUTRAL_FLOOR": (("classifier", "neutral_score_floor"), float),
    "TONE_SILENCE_DOMINANCE": (("classifier", "silence_dominance"), float),
    "LOG_LEVEL": (("logging", "level"), str),
    "METRICS_PORT": (("metrics", "port"), int),
    "CORS_ALLOW_ORIGINS": (("server", "cors_allow_origins"), str),
    "RUN_ID": (("runtime", "run_id"), str),
}


def _assign(config: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    target = config
    *parents, key = path
    for fragment in parents:
        target = target.setdefault(fragment, {})
        if not isinstance(target, dict):
            raise ConfigurationError(f"Cannot assign into non-dict configuration path {'.'.join(path)}")
    target[key] = value


def apply_env_overrides(config: Dict[str, Any], environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    env = os.environ if environ is None else environ
    for env_key, (path, parse) in _ENV_MAP.items():
        raw = env.get(env_key)
        if raw is None:
            continue
        try:
            value = parse(raw)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid value for {env_key}: {raw!r}") from exc
        _assign(config, path, value)
    return config


def load_settings_data(
    defaults_path: Path = DEFAULTS_PATH,
    local_path: Path = LOCAL_OVERRIDE_PATH,
    environ: Optional[Dict[str, str]] = None,
) -> Dict[str, Any]:
    config = read_yaml(defaults_path)
    config = merge_config(config, read_yaml(local_path))
    apply_env_overrides(config, environ)

    runtime_cfg = config.setdefault("runtime", {})
    if not runtime_cfg.get("run_id"):
        prefix_len = int(runtime_cfg.get("run_id_prefix_length", 8))
        runtime_cfg["run_id"] = uuid.uuid4().hex[:prefix_len]

    return config
