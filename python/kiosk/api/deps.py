"""FastAPI dependencies for route handlers.

Shared collaborators (asset host, authenticator) are created once by
create_app() and stored on app.state so tests can inject fakes.
"""

from fastapi import Request

from kiosk.auth.authenticator import Authenticator
from kiosk.db.session import get_db
from kiosk.storage import AssetHostBase

__all__ = ["get_asset_host", "get_authenticator", "get_db"]


def get_asset_host(request: Request) -> AssetHostBase:
    """Get the shared asset host from app state."""
    return request.app.state.asset_host


def get_authenticator(request: Request) -> Authenticator:
    """Get the shared admin authenticator from app state."""
    return request.app.state.authenticator
