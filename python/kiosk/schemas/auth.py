"""Admin session schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for POST /auth/login."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SessionOut(BaseModel):
    """Response schema for a minted admin session."""

    token: str
    token_type: str = "bearer"
    expires_at: datetime
