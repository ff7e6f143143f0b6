"""Kiosk home screen schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from kiosk.schemas.common import UploadPayload


class HomeOut(BaseModel):
    """Response schema for the kiosk home configuration."""

    video_url: str
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UpdateHomeRequest(BaseModel):
    """Request body for PUT /home: either a hosted URL or a video upload."""

    video_url: str | None = None
    video: UploadPayload | None = None
