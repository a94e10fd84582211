# label_lifecycle/routers/__init__.py
"""
API routers for v1 endpoints.
"""

from label_lifecycle.routers.admin import router as admin_router
from label_lifecycle.routers.cron import router as cron_router
from label_lifecycle.routers.labels import router as labels_router
from label_lifecycle.routers.videos import router as videos_router

__all__ = [
    "admin_router",
    "cron_router",
    "labels_router",
    "videos_router",
]
