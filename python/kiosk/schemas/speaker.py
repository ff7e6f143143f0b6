"""Speaker schedule Pydantic schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kiosk.schemas.common import UploadPayload, fields_or_unset


class SpeakerOut(BaseModel):
    """Response schema for a speaker."""

    id: UUID
    name: str
    designation: str
    image_url: str
    popup_image_url: str
    start_time: str
    end_time: str
    order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LiveSpeakerOut(BaseModel):
    """Response schema for GET /speakers/live."""

    at: str
    speaker: SpeakerOut | None


class CreateSpeakerRequest(BaseModel):
    """Request body for creating a speaker.

    `popup` defaults to the thumbnail image when omitted.
    """

    name: str
    designation: str
    thumbnail: UploadPayload
    popup: UploadPayload | None = None
    start_time: str = Field(..., description="HH:MM, 24-hour venue time")
    end_time: str = Field(..., description="HH:MM, 24-hour venue time")
    order: int = 0


class UpdateSpeakerRequest(BaseModel):
    """Request body for updating a speaker. All fields optional."""

    name: str | None = None
    designation: str | None = None
    thumbnail: UploadPayload | None = None
    popup: UploadPayload | None = None
    start_time: str | None = None
    end_time: str | None = None
    order: int | None = None

    def patch_fields(self) -> dict[str, Any]:
        """Return service keyword arguments, with UNSET for omitted fields."""
        return fields_or_unset(
            self, "name", "designation", "thumbnail", "popup", "start_time", "end_time", "order"
        )
