# lottoai/main.py
from __future__ import annotations
import base64, binascii, logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, Response
from fastapi.staticfiles import StaticFiles

from . import gemini
from .analysis import analyze, score_prediction
from .presets import DEFAULT_PRESET, PRESETS, SAMPLE_DATA
from .schemas import (
    AnalysisReport, AnalyzeRequest, CleanRequest, HistoricalData, HitScore,
    PredictedNumbers, PredictRequest, ScanRequest, ScoreRequest,
)

log = logging.getLogger("lottoai")

BASE_DIR   = Path(__file__).resolve().parent.parent
STATIC_DIR = BASE_DIR / "static"

DEFAULT_IMAGE_MIME = "image/jpeg"
NO_KEY_MSG = "API key is not configured. Please configure it in your deployment environment."

app = FastAPI(title="Lotto AI Predictor", version="1.0.0")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
app.add_middleware(GZipMiddleware, minimum_size=700)

if STATIC_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

@app.get("/")
async def root():
    index = STATIC_DIR / "index.html"
    if index.exists():
        return FileResponse(index)
    return {"ok": True, "tip": "upload static/index.html"}

@app.get("/favicon.ico")
async def favicon():
    svg = "<svg xmlns='http://www.w3.org/2000/svg' viewBox='0 0 16 16'><rect width='16' height='16' rx='3' fill='#06b6d4'/><text x='8' y='11' text-anchor='middle' font-size='10' fill='white'>L</text></svg>"
    return Response(content=svg, media_type="image/svg+xml")

@app.get("/healthz")
async def healthz():
    return {"ok": True, "ai_configured": gemini.is_configured()}

@app.get("/api/presets")
async def api_presets():
    return {"default": DEFAULT_PRESET, "presets": {name: cfg.model_dump() for name, cfg in PRESETS.items()}}

@app.get("/api/sample", response_model=HistoricalData)
async def api_sample():
    return HistoricalData(historical_data=SAMPLE_DATA)

# null means "no data yet": the client shows nothing rather than an empty result
@app.post("/api/analyze", response_model=Optional[AnalysisReport])
async def api_analyze(req: AnalyzeRequest):
    if not req.historical_data.strip():
        return None
    return analyze(req.historical_data, req.config)

def _require_ai():
    if not gemini.is_configured():
        raise HTTPException(503, NO_KEY_MSG)

@app.post("/api/predict", response_model=PredictedNumbers)
async def api_predict(req: PredictRequest):
    _require_ai()
    if not req.historical_data.strip():
        raise HTTPException(400, "Historical data cannot be empty.")
    try:
        return await gemini.predict_numbers(req.historical_data, req.config, req.strategy)
    except gemini.AIServiceError as e:
        log.warning(f"/api/predict fail: {e}")
        raise HTTPException(502, "Failed to get prediction. Please check your data/config or try again later.")

@app.post("/api/scan", response_model=HistoricalData)
async def api_scan(req: ScanRequest):
    _require_ai()
    data, mime_type = req.image_base64, req.mime_type
    if data.startswith("data:"):
        # data:<mime>;base64,<payload>
        head, sep, data = data.partition(",")
        if not sep:
            raise HTTPException(400, "Image data is not valid base64.")
        mime_type = mime_type or head[len("data:"):].split(";", 1)[0] or None
    try:
        image = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(400, "Image data is not valid base64.")
    if not image:
        raise HTTPException(400, "Image data is not valid base64.")
    try:
        extracted = await gemini.extract_numbers_from_image(image, mime_type or DEFAULT_IMAGE_MIME)
    except gemini.AIServiceError as e:
        log.warning(f"/api/scan fail: {e}")
        raise HTTPException(502, "Failed to scan image. Please try again or enter data manually.")
    return HistoricalData(historical_data=f"{req.historical_data}\n{extracted}".strip())

@app.post("/api/clean", response_model=HistoricalData)
async def api_clean(req: CleanRequest):
    if not req.historical_data.strip():
        return HistoricalData(historical_data=req.historical_data)
    _require_ai()
    try:
        cleaned = await gemini.clean_and_format_data(req.historical_data)
    except gemini.AIServiceError as e:
        log.warning(f"/api/clean fail: {e}")
        raise HTTPException(502, "AI failed to clean data. Please check the pasted content or format it manually.")
    return HistoricalData(historical_data=cleaned)

@app.post("/api/score", response_model=HitScore)
async def api_score(req: ScoreRequest):
    return score_prediction(req.predicted, req.actual_main, req.actual_special)
