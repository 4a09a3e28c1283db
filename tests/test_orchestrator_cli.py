# tests/test_orchestrator_cli.py
import io
import json
import wave

import numpy as np
import pytest

import app.orchestrator as orchestrator
from app.cli import build_parser, main
from app.orchestrator import run_analysis
from common.errors import DecodeError
from common.types import ALL_TONES, FEATURE_NAMES, SampleBuffer


def _wav_bytes(samples: np.ndarray, sample_rate: int = 16000) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes((np.clip(samples, -1.0, 1.0) * 32767).astype("<i2").tobytes())
    return buf.getvalue()


def _noise(seconds: float = 1.0, amplitude: float = 0.4, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.uniform(-amplitude, amplitude, int(seconds * 16000))


def test_run_analysis_output_shape():
    out = run_analysis(_wav_bytes(_noise()), "noise.wav", run_id="t1", seed=1)
    assert out["run_id"] == "t1"
    assert out["filename"] == "noise.wav"
    assert out["tone"] in ALL_TONES
    assert 0.5 <= out["intensity"] <= 1.0
    assert out["color"].count(",") == 2
    assert isinstance(out["particles"], int)
    assert "features" not in out


def test_run_analysis_explain():
    out = run_analysis(_wav_bytes(_noise()), "noise.wav", seed=1, explain=True)
    assert set(out["features"]) == set(FEATURE_NAMES)
    assert all(0.0 <= v <= 1.0 for v in out["normalized"].values())
    assert out["tone"] == max(out["scores"], key=out["scores"].get)


def test_run_analysis_seed_is_reproducible():
    data = _wav_bytes(_noise(seed=4))
    first = run_analysis(data, seed=21)
    second = run_analysis(data, seed=21)
    assert (first["tone"], first["intensity"]) == (second["tone"], second["intensity"])


def test_run_analysis_silent_input_reports_guard():
    out = run_analysis(_wav_bytes(np.zeros(16000)), "silence.wav")
    assert out["tone"] == "Neutral"
    assert out["intensity"] == 0.5
    assert out["guard"] == "all_zero"
    assert out["description"]


def test_run_analysis_decode_error_counts(monkeypatch):
    seen = []
    monkeypatch.setattr(orchestrator, "inc_counter", lambda counter, labels, amount=1.0: seen.append(counter))
    with pytest.raises(DecodeError):
        run_analysis(b"garbage", "x.wav", run_id="err")
    assert seen == [orchestrator.decode_errors_total]


def test_run_analysis_uses_decoded_buffer(monkeypatch):
    monkeypatch.setattr(orchestrator, "decode_audio", lambda data, filename: SampleBuffer(np.full(44100, 0.9), 44100))
    out = run_analysis(b"anything", "clip.m4a", seed=0)
    assert out["tone"] in {"Hopeful", "Grateful"}


# -------------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------------

def test_parser_requires_audio():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["analyze"])


def test_cli_analyze_prints_json(tmp_path, capsys):
    audio = tmp_path / "clip.wav"
    audio.write_bytes(_wav_bytes(_noise()))
    assert main(["analyze", "--audio", str(audio), "--seed", "5", "--run-id", "cli", "--explain"]) == 0
    lines = [ln for ln in capsys.readouterr().out.splitlines() if ln.strip()]
    out = json.loads(lines[-1])
    assert out["run_id"] == "cli"
    assert out["filename"] == "clip.wav"
    assert out["tone"] in ALL_TONES
    assert "scores" in out


def test_cli_missing_file(tmp_path, capsys):
    assert main(["analyze", "--audio", str(tmp_path / "nope.wav")]) == 2
    assert "cannot read" in capsys.readouterr().err


def test_cli_undecodable_file(tmp_path, capsys):
    audio = tmp_path / "broken.wav"
    audio.write_bytes(b"not audio at all")
    assert main(["analyze", "--audio", str(audio)]) == 1
    assert "error" in capsys.readouterr().err
