"""
Purpose:
- FastAPI application factory and router mounts.
- The user image store and captioner are created here and handed to the
  picture service through app.state, so tests can inject their own.
- `pixelguess` (console script) serves it with uvicorn on $ADDR:$PORT (default :8080).
"""

import logging
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .core.logconfig import configure_logging
from .core.settings import Settings, settings as default_settings
from .api.health import router as health_router
from .api.pages import router as pages_router
from .api.pictures import router as pictures_router
from .services.pictures import PictureService
from .services.samples import SampleLibrary
from .store.user_images import UserImageStore

logger = logging.getLogger(__name__)

def create_app(
    cfg: Optional[Settings] = None,
    store: Optional[UserImageStore] = None,
    captioner: Optional[Any] = None,
) -> FastAPI:
    cfg = cfg or default_settings
    if store is None:
        store = UserImageStore(max_images=cfg.max_images, id_length=cfg.image_id_length)
    if captioner is None:
        from .vlm.gemini_captioner import get_captioner
        captioner = get_captioner()

    app = FastAPI(title="Pixel Guess API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = cfg
    app.state.pictures = PictureService(
        store=store,
        captioner=captioner,
        samples=SampleLibrary(cfg.samples_path),
        jpeg_quality=cfg.jpeg_quality,
    )

    app.include_router(pages_router)
    app.include_router(pictures_router)
    app.include_router(health_router)

    # static directories are optional in dev checkouts
    for prefix, directory in (("/samples", cfg.samples_path), ("/static", cfg.static_path)):
        if directory.is_dir():
            app.mount(prefix, StaticFiles(directory=str(directory)), name=prefix.strip("/"))
        else:
            logger.warning("Not serving %s: directory %s not found", prefix, directory)
    return app

def run() -> None:
    import uvicorn

    configure_logging(default_settings.log_level)
    logger.info(
        "Starting server for project %r, model %r, model location %r",
        default_settings.google_cloud_project, default_settings.model_name, default_settings.location,
    )
    logger.info("Listening on %s:%d", default_settings.addr, default_settings.port)
    uvicorn.run(create_app(), host=default_settings.host, port=default_settings.port)

if __name__ == "__main__":
    run()
