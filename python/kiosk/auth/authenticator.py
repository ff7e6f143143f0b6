"""Admin authentication.

Provides:
- TokenVerifier: Protocol for session token verification
- Authenticator: Protocol for credential login plus verification
- AdminCredentialAuthenticator: single configured admin, HS256 session tokens

The CMS has exactly one admin. Credentials are compared in constant time and
a successful login mints a short-lived signed session token.
"""

import hmac
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidIssuerError,
    InvalidSignatureError,
    InvalidTokenError,
)

from kiosk.errors import ApiError, ApiErrorCode

logger = logging.getLogger(__name__)

# Clock skew allowance in seconds
CLOCK_SKEW_SECONDS = 30

TOKEN_ALGORITHM = "HS256"
DEFAULT_ISSUER = "kiosk-cms"


@dataclass(frozen=True)
class AdminSession:
    """A freshly minted admin session."""

    token: str
    expires_at: datetime


class TokenVerifier(Protocol):
    """Protocol for session token verification."""

    def verify(self, token: str) -> dict[str, Any]:
        """Verify token and return decoded claims.

        Raises:
            ApiError(E_UNAUTHENTICATED): Token is invalid, expired, or malformed.
        """
        ...


class Authenticator(TokenVerifier, Protocol):
    """Protocol for admin login and session verification."""

    def login(self, email: str, password: str) -> AdminSession:
        """Check credentials and mint a session.

        Raises:
            ApiError(E_INVALID_CREDENTIALS): Credentials do not match.
        """
        ...


class AdminCredentialAuthenticator:
    """Authenticator for the single configured CMS admin.

    Validates:
    - email (case-insensitive) and password against configuration
    - Session token signature (HS256), exp with clock skew, iss, sub
    """

    def __init__(
        self,
        admin_email: str | None,
        admin_password: str | None,
        secret: str,
        ttl_s: int,
        issuer: str = DEFAULT_ISSUER,
    ):
        """Initialize the authenticator.

        Args:
            admin_email: Configured admin login. None disables login.
            admin_password: Configured admin password. None disables login.
            secret: HS256 signing key.
            ttl_s: Session lifetime in seconds.
            issuer: Token issuer claim.
        """
        self.admin_email = (admin_email or "").strip().lower()
        self.admin_password = admin_password or ""
        self.secret = secret
        self.ttl_s = ttl_s
        self.issuer = issuer

    def login(self, email: str, password: str) -> AdminSession:
        if not self.admin_email or not self.admin_password:
            logger.warning("auth_failure", extra={"reason": "admin_not_configured"})
            raise ApiError(ApiErrorCode.E_INVALID_CREDENTIALS, "Invalid email or password")

        # Both comparisons always run so timing does not reveal which failed
        email_ok = hmac.compare_digest(
            (email or "").strip().lower().encode(), self.admin_email.encode()
        )
        password_ok = hmac.compare_digest((password or "").encode(), self.admin_password.encode())
        if not (email_ok and password_ok):
            logger.warning("auth_failure", extra={"reason": "invalid_credentials"})
            raise ApiError(ApiErrorCode.E_INVALID_CREDENTIALS, "Invalid email or password")

        return self.issue(self.admin_email)

    def issue(self, email: str) -> AdminSession:
        """Mint a session token for `email` without checking credentials."""
        now = datetime.now(UTC)
        expires_at = now + timedelta(seconds=self.ttl_s)
        claims = {
            "sub": email,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": str(uuid.uuid4()),
        }
        token = jwt.encode(claims, self.secret, algorithm=TOKEN_ALGORITHM)
        return AdminSession(token=token, expires_at=expires_at)

    def verify(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[TOKEN_ALGORITHM],
                issuer=self.issuer,
                leeway=CLOCK_SKEW_SECONDS,
                options={"require": ["exp", "iss", "sub"]},
            )
        except ExpiredSignatureError as e:
            logger.warning("auth_failure", extra={"reason": "expired_token"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Session expired") from e
        except InvalidSignatureError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_signature"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token signature") from e
        except InvalidIssuerError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_issuer"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token issuer") from e
        except DecodeError as e:
            logger.warning("auth_failure", extra={"reason": "decode_error", "error": str(e)})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token format") from e
        except InvalidTokenError as e:
            logger.warning("auth_failure", extra={"reason": "invalid_token", "error": str(e)})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token") from e

        if not payload.get("sub"):
            logger.warning("auth_failure", extra={"reason": "missing_sub"})
            raise ApiError(ApiErrorCode.E_UNAUTHENTICATED, "Invalid token: missing sub")

        return payload
