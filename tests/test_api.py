# tests/test_api.py
import base64
import io
import wave

import numpy as np
import pytest

pytest.importorskip("fastapi")
pytest.importorskip("httpx")

from fastapi.testclient import TestClient

from common.types import ALL_TONES
from server.api import app

# no `with` block: the lifespan hook (metrics server) does not run
client = TestClient(app)


def _tone_wav(seconds: float = 1.0, sample_rate: int = 16000, amplitude: float = 0.6) -> bytes:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    frames = (amplitude * np.sin(2 * np.pi * 220 * t) * 32767).astype("<i2")
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(frames.tobytes())
    return buf.getvalue()


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["tones"] == list(ALL_TONES)
    assert body["jitter"]["low"] < body["jitter"]["high"]


def test_analyze_single_file():
    r = client.post(
        "/analyze",
        files={"files": ("tone.wav", _tone_wav(), "audio/wav")},
        data={"run_id": "api-test", "seed": "3"},
    )
    assert r.status_code == 200
    (item,) = r.json()["results"]
    assert item["filename"] == "tone.wav"
    assert item["run_id"] == "api-test"
    assert item["tone"] in ALL_TONES
    assert 0.5 <= item["intensity"] <= 1.0
    assert item["particles"] >= 0
    assert item["scores"] is None


def test_analyze_seed_is_reproducible():
    data = _tone_wav(amplitude=0.3)
    outs = [
        client.post("/analyze", files={"files": ("a.wav", data, "audio/wav")}, data={"seed": "9"}).json()["results"][0]
        for _ in range(2)
    ]
    assert outs[0]["tone"] == outs[1]["tone"]
    assert outs[0]["intensity"] == outs[1]["intensity"]


def test_analyze_multiple_files_with_explain():
    r = client.post(
        "/analyze",
        files=[
            ("files", ("a.wav", _tone_wav(), "audio/wav")),
            ("files", ("b.wav", _tone_wav(amplitude=0.0), "audio/wav")),
        ],
        data={"run_id": "batch", "explain": "true"},
    )
    assert r.status_code == 200
    a, b = r.json()["results"]
    assert (a["run_id"], b["run_id"]) == ("batch-01", "batch-02")
    assert set(a["features"]) == set(a["normalized"])
    assert b["tone"] == "Neutral"
    assert b["intensity"] == 0.5
    assert b["guard"] == "all_zero"


def test_analyze_undecodable_file_is_422():
    r = client.post("/analyze", files={"files": ("bad.wav", b"not a wave", "audio/wav")})
    assert r.status_code == 422
    assert "bad.wav" in r.json()["detail"]


def test_analyze_emotion_base64():
    payload = base64.b64encode(_tone_wav()).decode("ascii")
    r = client.post("/analyze-emotion", json={"audioData": f"data:audio/wav;base64,{payload}"})
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"tone", "intensity", "description"}
    assert body["tone"] in ALL_TONES
    assert 0.5 <= body["intensity"] <= 1.0


def test_analyze_emotion_requires_audio():
    assert client.post("/analyze-emotion", json={}).status_code == 400
    assert client.post("/analyze-emotion", json={"audioData": ""}).status_code == 400


def test_analyze_emotion_bad_payload_is_422():
    r = client.post("/analyze-emotion", json={"audioData": "%%%"})
    assert r.status_code == 422


def test_oversized_upload_is_413(monkeypatch):
    import server.api as api

    monkeypatch.setattr(api, "MAX_UPLOAD_BYTES", 1024)
    r = client.post("/analyze", files={"files": ("big.wav", _tone_wav(seconds=0.5), "audio/wav")})
    assert r.status_code == 413
    assert "big.wav" in r.json()["detail"]


def test_upload_at_limit_is_accepted(monkeypatch):
    import server.api as api

    data = _tone_wav(seconds=0.5)
    monkeypatch.setattr(api, "MAX_UPLOAD_BYTES", len(data))
    r = client.post("/analyze", files={"files": ("fits.wav", data, "audio/wav")})
    assert r.status_code == 200


def test_analyze_emotion_accepts_wrapped_base64():
    payload = base64.encodebytes(_tone_wav()).decode("ascii")
    r = client.post("/analyze-emotion", json={"audioData": payload})
    assert r.status_code == 200
