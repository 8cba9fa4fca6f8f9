"""API routers for emberd."""

from .apps import router as apps_router
from .pages import router as pages_router

__all__ = [
    "apps_router",
    "pages_router",
]
