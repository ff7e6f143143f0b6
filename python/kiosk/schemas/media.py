"""Media Pydantic schemas.

Contains request and response models for media and website endpoints.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from kiosk.schemas.common import UploadPayload


class MediaOut(BaseModel):
    """Response schema for a media asset."""

    id: UUID
    title: str
    kind: str  # "image", "video", "pdf", "qr", "website"
    url: str | None = None
    website_url: str | None = None
    content_type: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Request Schemas
# =============================================================================


class CreateMediaRequest(BaseModel):
    """Request schema for POST /media.

    Upload kinds carry `file`; kind=website carries `website_url`.
    Title and kind are validated in the service layer with specific error codes.
    """

    title: str
    kind: str
    file: UploadPayload | None = None
    website_url: str | None = None


class UpdateMediaRequest(BaseModel):
    """Request schema for PUT /media/{id}.

    Blank or omitted title/kind keep the stored values. A file is re-uploaded
    only when provided.
    """

    title: str | None = None
    kind: str | None = None
    file: UploadPayload | None = None
    website_url: str | None = None


class CreateWebsiteRequest(BaseModel):
    """Request schema for POST /websites."""

    title: str
    website_url: str
