"""Bubble routes.

Routes are transport-only:
- Parse path/query/body
- Call exactly one service function
- Return success(...) or raise ApiError

No domain logic or raw DB access in routes.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from kiosk.api.deps import get_db
from kiosk.auth.middleware import Admin, get_admin
from kiosk.errors import ApiErrorCode, InvalidRequestError
from kiosk.responses import success_response
from kiosk.schemas.bubble import CreateBubbleRequest, DeleteBubbleResponse, UpdateBubbleRequest
from kiosk.schemas.common import UNSET, Unset
from kiosk.services import bubbles as bubbles_service

router = APIRouter()


def _parse_parent_filter(value: str | None) -> UUID | None | Unset:
    """Map the parent_bubble_id query parameter to the service filter.

    Absent -> every bubble, "null" -> root bubbles, otherwise a bubble id.
    """
    if value is None:
        return UNSET
    if value.strip().lower() == "null":
        return None
    try:
        return UUID(value.strip())
    except ValueError as e:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST, "parent_bubble_id must be a UUID or 'null'"
        ) from e


@router.get("/bubbles")
def list_bubbles(
    db: Annotated[Session, Depends(get_db)],
    parent_bubble_id: Annotated[
        str | None, Query(description="Parent bubble id, or 'null' for root bubbles")
    ] = None,
) -> dict:
    """List bubbles with their media resolved.

    Without a filter every bubble is returned (the kiosk builds the tree
    client-side).
    """
    result = bubbles_service.list_bubbles(db, _parse_parent_filter(parent_bubble_id))
    return success_response([bubble.model_dump(mode="json") for bubble in result])


@router.post("/bubbles", status_code=201)
def create_bubble(
    request: CreateBubbleRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Create a bubble. A null parent places it at root level."""
    result = bubbles_service.create_bubble(
        db,
        title=request.title,
        parent_bubble_id=request.parent_bubble_id,
        media_id=request.media_id,
    )
    return success_response(result.model_dump(mode="json"))


@router.get("/bubbles/{bubble_id}")
def get_bubble(
    bubble_id: UUID,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = bubbles_service.get_bubble(db, bubble_id)
    return success_response(result.model_dump(mode="json"))


@router.put("/bubbles/{bubble_id}")
def update_bubble(
    bubble_id: UUID,
    request: UpdateBubbleRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Update a bubble.

    Omitted fields are unchanged. Explicit null for parent_bubble_id moves the
    bubble to root level; explicit null for media_id detaches its media.
    """
    result = bubbles_service.update_bubble(db, bubble_id, **request.patch_fields())
    return success_response(result.model_dump(mode="json"))


@router.delete("/bubbles/{bubble_id}")
def delete_bubble(
    bubble_id: UUID,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    """Delete a bubble and its whole subtree."""
    deleted_count = bubbles_service.delete_bubble(db, bubble_id)
    return success_response(DeleteBubbleResponse(deleted_count=deleted_count).model_dump())
