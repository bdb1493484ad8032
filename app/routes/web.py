# app/routes/web.py
from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse, FileResponse
from pathlib import Path

from app import config

router = APIRouter()

# Compute STATIC_DIR robustly relative to this file:
BASE_DIR = Path(__file__).resolve().parents[1]  # <project_root>/app
STATIC_DIR = BASE_DIR / "static"

def _static_path(filename: str) -> Path:
    """Return resolved static path if exists, else None."""
    candidate = (STATIC_DIR / filename).resolve()
    # ensure the resolved path is still within STATIC_DIR
    if STATIC_DIR.resolve() in candidate.parents and candidate.exists():
        return candidate
    return None

@router.get("/", response_class=HTMLResponse)
async def serve_html():
    """Serves the HTML page"""
    index_file = _static_path("index.html")
    if index_file:
        return HTMLResponse(content=index_file.read_text(encoding="utf-8"))
    return HTMLResponse("<h1>Image to Video Generator</h1><p>Frontend not available</p>")

@router.get("/style.css")
async def serve_css():
    """Serves the CSS file"""
    css = _static_path("style.css")
    if css:
        return FileResponse(str(css), media_type="text/css")
    raise HTTPException(status_code=404, detail="style.css not found")

@router.get("/script.js")
async def serve_js():
    """Serves the Javascript file"""
    js = _static_path("script.js")
    if js:
        return FileResponse(str(js), media_type="text/javascript")
    raise HTTPException(status_code=404, detail="script.js not found")

@router.get("/health")
async def health():
    """Which backing services are configured"""
    missing = config.missing_settings()
    return {
        "status": "ok" if not missing else "misconfigured",
        "redis": "connected" if config.redis_client else "memory-fallback",
        "missing_settings": missing,
        "poll_interval_ms": config.POLL_INTERVAL_MS,
    }
