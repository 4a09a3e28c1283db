# audio_emotion/decode.py
"""
Decode boundary: encoded audio bytes -> mono SampleBuffer.

8/16/32-bit PCM WAV is parsed with the standard `wave` module; other WAV
encodings and any other container go through librosa (soundfile/audioread
backends). Failures of either path surface as DecodeError, the only error
the engine lets through.
"""

from __future__ import annotations

import base64
import binascii
import io
import os
import struct
import wave
from typing import Optional

import numpy as np

# librosa is only needed for non-WAV containers
try:
    import librosa
    HAS_LIBROSA = True
except Exception:
    HAS_LIBROSA = False

from common.errors import DecodeError
from common.types import SampleBuffer

_PCM_DTYPES = {1: np.uint8, 2: "<i2", 4: "<i4"}
_PCM_SCALE = {1: 128.0, 2: 32768.0, 4: 2.0 ** 31}


def _looks_like_wav(data: bytes) -> bool:
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WAVE"


def decode_wav(data: bytes) -> SampleBuffer:
    """PCM WAV (8/16/32-bit, any channel count) downmixed by channel average."""
    try:
        with wave.open(io.BytesIO(data), "rb") as wf:
            samp_width = wf.getsampwidth()
            n_channels = wf.getnchannels()
            sample_rate = wf.getframerate()
            frames = wf.readframes(wf.getnframes())
    except (wave.Error, EOFError, struct.error) as exc:
        raise DecodeError(f"invalid WAV data: {exc}") from exc

    if n_channels < 1 or sample_rate <= 0:
        raise DecodeError(f"WAV header declares {n_channels} channels at {sample_rate} Hz")
    if samp_width not in _PCM_DTYPES:
        raise DecodeError(f"unsupported WAV sample width: {samp_width} bytes")

    # a truncated file can end mid-sample
    frames = frames[: len(frames) - len(frames) % samp_width]
    raw = np.frombuffer(frames, dtype=_PCM_DTYPES[samp_width]).astype(np.float64)
    if samp_width == 1:
        # 8-bit PCM is unsigned with a 128 bias
        raw -= 128.0
    usable = raw.size - raw.size % n_channels
    mono = raw[:usable].reshape(-1, n_channels).mean(axis=1)
    return SampleBuffer(mono / _PCM_SCALE[samp_width], sample_rate)


def decode_with_librosa(data: bytes) -> SampleBuffer:
    if not HAS_LIBROSA:
        raise DecodeError("librosa is not available; only PCM WAV can be decoded")
    try:
        signal, sr = librosa.load(io.BytesIO(data), sr=None, mono=True)
    except Exception as exc:
        raise DecodeError(f"could not decode audio: {exc}") from exc
    return SampleBuffer(signal, int(sr))


def decode_audio(data: bytes, filename: Optional[str] = None) -> SampleBuffer:
    """
    Decode any supported container. The filename extension is only a hint;
    the RIFF/WAVE header decides the WAV path. WAV variants the `wave`
    module rejects are retried with librosa when it is installed.
    """
    if not data:
        raise DecodeError("no audio data")
    ext = os.path.splitext(filename or "")[1].lower()
    if _looks_like_wav(data):
        try:
            return decode_wav(data)
        except DecodeError:
            # 24-bit, float and extensible WAV are left to librosa
            if not HAS_LIBROSA:
                raise
            return decode_with_librosa(data)
    if ext == ".wav":
        raise DecodeError("file has a .wav extension but no RIFF/WAVE header")
    return decode_with_librosa(data)


def base64_payload(payload: str) -> bytes:
    """Raw bytes of a base64 string, optionally wrapped in a data: URL."""
    if "," in payload and payload.lstrip().startswith("data:"):
        payload = payload.split(",", 1)[1]
    try:
        # line-wrapped payloads are accepted
        data = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"audio payload is not valid base64: {exc}") from exc
    return data


def decode_base64(payload: str, filename: Optional[str] = None) -> SampleBuffer:
    return decode_audio(base64_payload(payload), filename)
