import json
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile

from . import __version__
from .config import build_config
from .errors import ConfigurationError, InputReadError
from .models import HealthResponse, NormalizeResponse
from .normalize import normalize_csv_bytes

app = FastAPI(
    title="schema-normalizer",
    description="Deterministic fixed-schema repair for drifted CSV exports",
    version=__version__,
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/normalize", response_model=NormalizeResponse)
async def normalize_csv(file: UploadFile = File(...), config: Optional[str] = Form(default=None)):
    if not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    try:
        cfg = build_config(json.loads(config) if config else None)
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=422, detail=f"config is not valid JSON: {exc}")
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    raw = await file.read()
    try:
        return normalize_csv_bytes(raw, cfg)
    except (ConfigurationError, InputReadError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))
