"""Kiosk CMS application factory.

Middleware runs in reverse order of registration. Per request:
1. RequestIDMiddleware (added last by add_request_id_middleware): id, timer, access log
2. CORSMiddleware, when KIOSK_CORS_ORIGINS is set
3. AuthMiddleware: session required on writes, sets request.state.admin
4. reject_malformed_json, then the route

Shared collaborators live on app.state:
- asset_host: Cloudinary, or the in-memory fake when unconfigured
- authenticator: the single-admin authenticator
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kiosk.api.routes import create_api_router
from kiosk.auth.authenticator import AdminCredentialAuthenticator, Authenticator
from kiosk.auth.middleware import AuthMiddleware
from kiosk.config import Settings, get_settings
from kiosk.logging import configure_logging, get_logger
from kiosk.middleware.request_id import RequestIDMiddleware
from kiosk.responses import register_exception_handlers
from kiosk.storage import AssetHostBase, create_asset_host

logger = get_logger(__name__)

CORS_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_HEADERS = ["Authorization", "Content-Type", "X-Request-ID"]


def create_authenticator(settings: Settings | None = None) -> AdminCredentialAuthenticator:
    settings = settings or get_settings()
    return AdminCredentialAuthenticator(
        admin_email=settings.admin_email,
        admin_password=settings.admin_password,
        secret=settings.effective_session_secret,
        ttl_s=settings.session_ttl_s,
    )


def create_app(
    skip_auth_middleware: bool = False,
    authenticator: Authenticator | None = None,
    asset_host: AssetHostBase | None = None,
) -> FastAPI:
    """Build the API.

    Args:
        skip_auth_middleware: Leave writes unauthenticated (tests of the routes alone).
        authenticator: Replaces the configured admin authenticator.
        asset_host: Replaces the configured asset host.
    """
    settings = get_settings()
    configure_logging(json_format=settings.log_format == "json", level=settings.log_level)

    app = FastAPI(
        title="Kiosk CMS API",
        description="Content management backend for event kiosk displays",
        version="0.1.0",
    )
    app.state.authenticator = authenticator or create_authenticator(settings)
    app.state.asset_host = asset_host or create_asset_host(settings)

    register_exception_handlers(app)
    app.include_router(create_api_router())

    if not skip_auth_middleware:
        app.add_middleware(AuthMiddleware, verifier=app.state.authenticator)

    # Outside auth so preflight requests are answered without a session
    if settings.cors_origin_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origin_list,
            allow_methods=CORS_METHODS,
            allow_headers=CORS_HEADERS,
            expose_headers=["X-Request-ID"],
        )

    logger.info(
        "app_created",
        env=settings.kiosk_env.value,
        auth_enabled=not skip_auth_middleware,
        asset_host=type(app.state.asset_host).__name__,
        cors_origins=settings.cors_origin_list,
    )
    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add RequestIDMiddleware as the outermost layer.

    Call after create_app() so auth failures also carry X-Request-ID.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
