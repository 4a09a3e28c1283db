# tests/test_config.py
import pytest

from common.errors import ConfigurationError
from config.loader import apply_env_overrides, load_settings_data, merge_config, read_yaml
from config.settings import load_settings


def test_defaults(tmp_path):
    settings = load_settings(local_path=tmp_path / "missing.yaml", environ={})
    assert settings.jitter.low == 0.8
    assert settings.jitter.high == 1.2
    assert settings.jitter.seed is None
    assert settings.classifier.silence_dominance == 0.95
    assert settings.classifier.neutral_score_floor == pytest.approx(1e-6)
    assert settings.metrics_port == 9000
    assert settings.server.cors_allow_origins == ["*"]
    assert len(settings.run_id) == 8


def test_merge_is_recursive():
    base = {"jitter": {"low": 0.8, "high": 1.2}, "logging": {"level": "INFO"}}
    merged = merge_config(base, {"jitter": {"high": 1.5}})
    assert merged == {"jitter": {"low": 0.8, "high": 1.5}, "logging": {"level": "INFO"}}
    assert base["jitter"]["high"] == 1.2


def test_local_override_file(tmp_path):
    local = tmp_path / "local.yaml"
    local.write_text("jitter:\n  seed: 42\nserver:\n  cors_allow_origins: [\"http://a\", \"http://b\"]\n", encoding="utf-8")
    settings = load_settings(local_path=local, environ={})
    assert settings.jitter.seed == 42
    assert settings.jitter.low == 0.8
    assert settings.server.cors_allow_origins == ["http://a", "http://b"]


def test_env_overrides_win_over_files(tmp_path):
    local = tmp_path / "local.yaml"
    local.write_text("jitter:\n  seed: 42\n", encoding="utf-8")
    settings = load_settings(local_path=local, environ={
        "TONE_JITTER_SEED": "none",
        "TONE_SILENCE_DOMINANCE": "0.9",
        "CORS_ALLOW_ORIGINS": "http://a, http://b",
        "RUN_ID": "fixed-run",
        "LOG_LEVEL": "DEBUG",
    })
    assert settings.jitter.seed is None
    assert settings.classifier.silence_dominance == 0.9
    assert settings.server.cors_allow_origins == ["http://a", "http://b"]
    assert settings.run_id == "fixed-run"
    assert settings.logging.level == "DEBUG"


def test_invalid_env_value_raises():
    with pytest.raises(ConfigurationError, match="METRICS_PORT"):
        apply_env_overrides({}, {"METRICS_PORT": "ninety"})


@pytest.mark.parametrize("env", [
    {"TONE_JITTER_LOW": "1.5", "TONE_JITTER_HIGH": "1.0"},
    {"TONE_JITTER_LOW": "0"},
    {"TONE_SILENCE_DOMINANCE": "1.5"},
])
def test_invalid_ranges_raise(tmp_path, env):
    with pytest.raises(ConfigurationError):
        load_settings(local_path=tmp_path / "missing.yaml", environ=env)


def test_non_mapping_yaml_raises(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        read_yaml(path)


def test_run_id_is_generated_once_per_load(tmp_path):
    first = load_settings_data(local_path=tmp_path / "missing.yaml", environ={})
    second = load_settings_data(local_path=tmp_path / "missing.yaml", environ={})
    assert first["runtime"]["run_id"] != second["runtime"]["run_id"]
