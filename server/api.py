# server/api.py
from contextlib import asynccontextmanager
from typing import Optional, List
import uuid

from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from app.orchestrator import run_analysis
from audio_emotion.decode import base64_payload
from common.errors import DecodeError
from common.types import ALL_TONES
from config.settings import SETTINGS
from utils.logging import get_logger
from utils.metrics import init_metrics

logger = get_logger("api")

METRICS_PORT = SETTINGS.metrics.port
MAX_UPLOAD_BYTES = SETTINGS.server.max_upload_bytes


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # /metrics is started once per process, when the server actually runs
    if METRICS_PORT:
        init_metrics(METRICS_PORT)
    yield


app = FastAPI(title="Voice Tone API", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=SETTINGS.server.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class AnalyzeItem(BaseModel):
    filename: str
    run_id: str
    tone: str
    intensity: float = Field(..., ge=0.5, le=1.0)
    description: str
    color: str
    particles: int
    guard: Optional[str] = None
    features: Optional[dict] = None
    normalized: Optional[dict] = None
    scores: Optional[dict] = None


class AnalyzeResponse(BaseModel):
    results: List[AnalyzeItem]


class EmotionRequest(BaseModel):
    audioData: Optional[str] = Field(default=None, description="Base64 encoded audio (data: URLs accepted)")
    filename: Optional[str] = None


class EmotionResponse(BaseModel):
    tone: str
    intensity: float
    description: str


@app.get("/health")
def health():
    return {
        "status": "ok",
        "run_id": SETTINGS.run_id,
        "tones": list(ALL_TONES),
        "jitter": {"low": SETTINGS.jitter.low, "high": SETTINGS.jitter.high, "seeded": SETTINGS.jitter.seed is not None},
        "metrics_port": METRICS_PORT,
    }


@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze_files(
    files: List[UploadFile] = File(..., description="One or more audio files"),
    run_id: Optional[str] = Form(default=None),
    seed: Optional[int] = Form(default=None, description="Pin jitter for reproducible output"),
    explain: bool = Form(default=False, description="Include features and candidate scores"),
):
    if not files:
        raise HTTPException(status_code=400, detail="Attach at least one audio file.")

    base_run_id = run_id or uuid.uuid4().hex[:8]
    results: List[AnalyzeItem] = []

    for idx, file in enumerate(files, start=1):
        # never buffer more than one byte past the limit
        if file.size is not None and file.size > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail=f"{file.filename}: upload exceeds {MAX_UPLOAD_BYTES} bytes")
        content = await file.read(MAX_UPLOAD_BYTES + 1)
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail=f"{file.filename}: upload exceeds {MAX_UPLOAD_BYTES} bytes")
        rid = base_run_id if len(files) == 1 else f"{base_run_id}-{idx:02d}"
        try:
            out = await run_in_threadpool(
                run_analysis, content, file.filename, rid, seed=seed, explain=explain,
            )
        except DecodeError as exc:
            raise HTTPException(status_code=422, detail=f"{file.filename}: {exc}") from exc
        out["filename"] = file.filename or f"audio-{idx}"
        results.append(AnalyzeItem(**out))

    return AnalyzeResponse(results=results)


@app.post("/analyze-emotion", response_model=EmotionResponse)
async def analyze_emotion(body: EmotionRequest):
    """JSON variant: base64 audio in, {tone, intensity, description} out."""
    if not body.audioData:
        raise HTTPException(status_code=400, detail="Audio data is required")
    try:
        data = base64_payload(body.audioData)
        out = await run_in_threadpool(run_analysis, data, body.filename)
    except DecodeError as exc:
        logger.warning("analyze_emotion:decode_error", extra={"extra_fields": {"error": str(exc)}})
        raise HTTPException(status_code=422, detail=f"Failed to decode audio: {exc}") from exc
    return EmotionResponse(tone=out["tone"], intensity=out["intensity"], description=out["description"])
