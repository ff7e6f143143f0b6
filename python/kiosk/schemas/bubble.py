"""Bubble Pydantic schemas.

Contains request and response models for the navigation tree endpoints.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

from kiosk.schemas.common import fields_or_unset
from kiosk.schemas.media import MediaOut

BubbleKind = Literal["leaf", "branch"]


class CreateBubbleRequest(BaseModel):
    """Request body for creating a bubble. Null parent means root level."""

    title: str
    parent_bubble_id: UUID | None = None
    media_id: UUID | None = None


class UpdateBubbleRequest(BaseModel):
    """Request body for updating a bubble.

    Omitted fields are left unchanged; explicit null clears parent or media.
    """

    title: str | None = None
    parent_bubble_id: UUID | None = None
    media_id: UUID | None = None

    def patch_fields(self) -> dict[str, Any]:
        """Return service keyword arguments, with UNSET for omitted fields."""
        return fields_or_unset(self, "title", "parent_bubble_id", "media_id")


class BubbleOut(BaseModel):
    """Response schema for a bubble.

    `kind` is derived: "leaf" when media is attached, otherwise "branch".
    `media` is null when no media is attached or the referenced media was deleted.
    """

    id: UUID
    title: str
    parent_bubble_id: UUID | None
    media_id: UUID | None
    media: MediaOut | None
    kind: BubbleKind
    child_count: int
    created_at: datetime
    updated_at: datetime


class DeleteBubbleResponse(BaseModel):
    """Response schema for DELETE /bubbles/{id}."""

    deleted_count: int
