# Common language: Environment/ops probe that surfaces versions, config, store usage and captioner status.

from fastapi import APIRouter, Request
import sys, importlib

router = APIRouter(tags=["health"])

def _ver(modname: str) -> str:
    try:
        m = importlib.import_module(modname)
        return getattr(m, "__version__", "unknown")
    except ImportError:
        return "not-installed"

@router.get("/healthz")
def healthz(request: Request):
    cfg = request.app.state.settings
    pictures = request.app.state.pictures
    captioner = pictures.captioner
    return {
        "status": "ok",
        "python": sys.version.split()[0],
        "versions": {
            "fastapi": _ver("fastapi"),
            "uvicorn": _ver("uvicorn"),
            "PIL": _ver("PIL"),
            "pydantic_settings": _ver("pydantic_settings"),
            "google.genai": _ver("google.genai"),
            "psutil": _ver("psutil"),
        },
        "config": {
            "project": cfg.google_cloud_project,
            "model": cfg.model_name,
            "location": cfg.location,
            "samples_dir": str(cfg.samples_path),
        },
        "store": {
            "images": len(pictures.store),
            "max_images": pictures.store.max_images,
        },
        "samples": pictures.samples.list_samples(),
        "captioner": {
            "kind": type(captioner).__name__,
            "stub_reason": getattr(captioner, "reason", None),
        },
    }
