"""Test helpers for authentication, upload payloads, and response checks.

Provides:
- Session token minting for test authentication
- Header generation for test requests
- Inline upload payload builders
"""

import base64
import time

import jwt
from sqlalchemy import Engine

from kiosk.auth.authenticator import AdminCredentialAuthenticator

ADMIN_EMAIL = "admin@kiosk.test"
ADMIN_PASSWORD = "correct-horse-battery"
TEST_SESSION_SECRET = "test-session-secret-that-is-long-enough-0123"

# Smallest valid-looking file headers; content is never decoded by the host
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
PDF_BYTES = b"%PDF-1.4\n%kiosk\n"
MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 16


def auth_headers(authenticator: AdminCredentialAuthenticator) -> dict[str, str]:
    """Mint a fresh admin session and return the Authorization header."""
    session = authenticator.issue(ADMIN_EMAIL)
    return {"Authorization": f"Bearer {session.token}"}


def mint_token(
    secret: str = TEST_SESSION_SECRET,
    expires_in: int = 3600,
    issuer: str = "kiosk-cms",
    **extra_claims,
) -> str:
    """Mint an HS256 session token with arbitrary claims."""
    now = int(time.time())
    payload = {
        "sub": ADMIN_EMAIL,
        "iss": issuer,
        "iat": now,
        "exp": now + expires_in,
        **extra_claims,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


def upload_payload(
    data: bytes = PNG_BYTES,
    content_type: str | None = "image/png",
    filename: str | None = None,
) -> dict:
    """Build an inline upload payload with bare base64 data."""
    payload = {"data": base64.b64encode(data).decode()}
    if content_type is not None:
        payload["content_type"] = content_type
    if filename is not None:
        payload["filename"] = filename
    return payload


def data_url_payload(data: bytes = PNG_BYTES, content_type: str = "image/png") -> dict:
    """Build an inline upload payload wrapped as a data URL."""
    encoded = base64.b64encode(data).decode()
    return {"data": f"data:{content_type};base64,{encoded}"}


def is_sqlite(engine: Engine) -> bool:
    return engine.dialect.name == "sqlite"


def assert_error(response, status_code: int, code: str) -> dict:
    """Assert an error envelope and return its error object."""
    assert response.status_code == status_code, response.text
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    return body["error"]
