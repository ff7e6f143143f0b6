"""API route definitions.

Uses a factory pattern to avoid import-time settings loading.
This allows tests to import modules without requiring all environment
variables to be configured upfront.
"""

from fastapi import APIRouter

from kiosk.api.routes.auth import router as auth_router
from kiosk.api.routes.bubbles import router as bubbles_router
from kiosk.api.routes.health import router as health_router
from kiosk.api.routes.home import router as home_router
from kiosk.api.routes.media import router as media_router
from kiosk.api.routes.speakers import router as speakers_router


def create_api_router() -> APIRouter:
    """Create and configure the API router.

    Returns:
        Configured APIRouter with all routes registered.
    """
    api_router = APIRouter()
    api_router.include_router(health_router, tags=["health"])
    api_router.include_router(auth_router, tags=["auth"])
    api_router.include_router(bubbles_router, tags=["bubbles"])
    api_router.include_router(media_router, tags=["media"])
    api_router.include_router(speakers_router, tags=["speakers"])
    api_router.include_router(home_router, tags=["home"])
    return api_router


__all__ = ["create_api_router"]
