"""Authentication module.

This module provides:
- The single-admin authenticator and session tokens
- Auth middleware for FastAPI
- Request state with admin identity
"""

from kiosk.auth.authenticator import (
    AdminCredentialAuthenticator,
    AdminSession,
    Authenticator,
    TokenVerifier,
)
from kiosk.auth.middleware import Admin, AuthMiddleware, get_admin

__all__ = [
    "Admin",
    "AdminCredentialAuthenticator",
    "AdminSession",
    "AuthMiddleware",
    "Authenticator",
    "TokenVerifier",
    "get_admin",
]
