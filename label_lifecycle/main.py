# label_lifecycle/main.py

from __future__ import annotations

from fastapi import FastAPI

from label_lifecycle import __version__
from label_lifecycle.config import get_settings
from label_lifecycle.logging_config import configure_logging
from label_lifecycle.routers import admin_router, cron_router, labels_router, videos_router

settings = get_settings()
configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)

app = FastAPI(title="Video Label Lifecycle", version=__version__)

app.include_router(labels_router)
app.include_router(videos_router)
app.include_router(cron_router)
app.include_router(admin_router)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "video-label-lifecycle"}
