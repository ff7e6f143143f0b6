"""Session enforcement for CMS writes.

The kiosk screen only reads, through public GET routes. Everything else is
the CMS writing, and needs a bearer session token from POST /auth/login.

Provides:
- AuthMiddleware: rejects unauthenticated writes with 401 E_UNAUTHENTICATED
- get_admin: the authenticated admin inside a route
"""

import logging
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from kiosk.auth.authenticator import TokenVerifier
from kiosk.errors import ApiError, ApiErrorCode
from kiosk.responses import error_response

logger = logging.getLogger(__name__)

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})

# Writes that are how a session is obtained in the first place
PUBLIC_WRITE_PATHS = frozenset({"/auth/login"})

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Admin:
    """The CMS admin a request was authenticated as."""

    email: str


def requires_session(method: str, path: str) -> bool:
    return method not in SAFE_METHODS and path not in PUBLIC_WRITE_PATHS


def _unauthenticated(message: str, reason: str, path: str) -> JSONResponse:
    logger.warning("auth_failure", extra={"reason": reason, "request_path": path})
    return JSONResponse(
        status_code=401,
        content=error_response(ApiErrorCode.E_UNAUTHENTICATED, message),
    )


class AuthMiddleware(BaseHTTPMiddleware):
    """Verify the bearer session on writes and expose the admin on request.state."""

    def __init__(self, app: ASGIApp, verifier: TokenVerifier):
        super().__init__(app)
        self.verifier = verifier

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not requires_session(request.method, path):
            return await call_next(request)

        header = request.headers.get("authorization")
        if not header:
            return _unauthenticated("Authentication required", "missing_header", path)

        token = ""
        if header.lower().startswith(BEARER_PREFIX):
            token = header[len(BEARER_PREFIX) :].strip()
        if not token:
            return _unauthenticated(
                "Invalid authorization header format", "invalid_header_format", path
            )

        try:
            claims = self.verifier.verify(token)
        except ApiError as e:
            # The verifier already logged the specific reason
            return JSONResponse(status_code=e.status_code, content=error_response(e.code, e.message))

        request.state.admin = Admin(email=claims["sub"])
        return await call_next(request)


def get_admin(request: Request) -> Admin:
    """FastAPI dependency for routes that write.

    Also guards apps built with skip_auth_middleware=True, where no admin is set.
    """
    admin = getattr(request.state, "admin", None)
    if admin is None:
        raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Authentication required")
    return admin
