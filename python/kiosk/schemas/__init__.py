"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from kiosk.schemas.auth import LoginRequest, SessionOut
from kiosk.schemas.bubble import (
    BubbleOut,
    CreateBubbleRequest,
    DeleteBubbleResponse,
    UpdateBubbleRequest,
)
from kiosk.schemas.common import UNSET, UploadPayload, Unset
from kiosk.schemas.home import HomeOut, UpdateHomeRequest
from kiosk.schemas.media import (
    CreateMediaRequest,
    CreateWebsiteRequest,
    MediaOut,
    UpdateMediaRequest,
)
from kiosk.schemas.speaker import (
    CreateSpeakerRequest,
    LiveSpeakerOut,
    SpeakerOut,
    UpdateSpeakerRequest,
)

__all__ = [
    # Shared
    "UNSET",
    "Unset",
    "UploadPayload",
    # Auth schemas
    "LoginRequest",
    "SessionOut",
    # Bubble schemas
    "BubbleOut",
    "CreateBubbleRequest",
    "UpdateBubbleRequest",
    "DeleteBubbleResponse",
    # Media schemas
    "MediaOut",
    "CreateMediaRequest",
    "UpdateMediaRequest",
    "CreateWebsiteRequest",
    # Speaker schemas
    "SpeakerOut",
    "LiveSpeakerOut",
    "CreateSpeakerRequest",
    "UpdateSpeakerRequest",
    # Home schemas
    "HomeOut",
    "UpdateHomeRequest",
]
