"""Admin login route.

The only mutating route reachable without a session.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from kiosk.api.deps import get_authenticator
from kiosk.auth.authenticator import Authenticator
from kiosk.logging import get_logger
from kiosk.responses import success_response
from kiosk.schemas.auth import LoginRequest, SessionOut

logger = get_logger(__name__)

router = APIRouter()


@router.post("/auth/login")
def login(
    request: LoginRequest,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> dict:
    """Exchange admin credentials for a bearer session token.

    Returns 401 E_INVALID_CREDENTIALS when the credentials do not match.
    """
    session = authenticator.login(request.email, request.password)
    logger.info("admin_logged_in", expires_at=session.expires_at.isoformat())
    result = SessionOut(token=session.token, expires_at=session.expires_at)
    return success_response(result.model_dump(mode="json"))
