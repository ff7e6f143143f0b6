"""Speaker schedule routes.

Routes are transport-only:
- Parse path/query/body
- Call exactly one service function
- Return success(...) or raise ApiError

No domain logic or raw DB access in routes.

IMPORTANT: /speakers/live must be registered BEFORE /speakers/{speaker_id}.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from kiosk.api.deps import get_asset_host, get_db
from kiosk.auth.middleware import Admin, get_admin
from kiosk.responses import success_response
from kiosk.schemas.speaker import CreateSpeakerRequest, UpdateSpeakerRequest
from kiosk.services import speakers as speakers_service
from kiosk.storage import AssetHostBase

router = APIRouter()


@router.get("/speakers")
def list_speakers(db: Annotated[Session, Depends(get_db)]) -> dict:
    """List speakers ordered by display order, then start time."""
    result = speakers_service.list_speakers(db)
    return success_response([speaker.model_dump(mode="json") for speaker in result])


@router.get("/speakers/live")
def get_live_speaker(
    db: Annotated[Session, Depends(get_db)],
    at: Annotated[str | None, Query(description="HH:MM venue time; defaults to now")] = None,
) -> dict:
    """Resolve the speaker live at a given time. speaker is null when nobody is live."""
    result = speakers_service.get_live_speaker(db, at)
    return success_response(result.model_dump(mode="json"))


@router.post("/speakers", status_code=201)
def create_speaker(
    request: CreateSpeakerRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
    host: Annotated[AssetHostBase, Depends(get_asset_host)],
) -> dict:
    """Create a speaker.

    Errors:
        E_INVALID_TIME / E_INVALID_TIME_WINDOW (400): bad times.
        E_SCHEDULE_CONFLICT (409): the window overlaps another speaker.
    """
    result = speakers_service.create_speaker(
        db,
        host,
        name=request.name,
        designation=request.designation,
        thumbnail=request.thumbnail,
        popup=request.popup,
        start_time=request.start_time,
        end_time=request.end_time,
        order=request.order,
    )
    return success_response(result.model_dump(mode="json"))


@router.get("/speakers/{speaker_id}")
def get_speaker(
    speaker_id: UUID,
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = speakers_service.get_speaker(db, speaker_id)
    return success_response(result.model_dump(mode="json"))


@router.put("/speakers/{speaker_id}")
def update_speaker(
    speaker_id: UUID,
    request: UpdateSpeakerRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
    host: Annotated[AssetHostBase, Depends(get_asset_host)],
) -> dict:
    """Partially update a speaker. The merged window is re-checked for overlap."""
    result = speakers_service.update_speaker(db, host, speaker_id, **request.patch_fields())
    return success_response(result.model_dump(mode="json"))


@router.delete("/speakers/{speaker_id}", status_code=204)
def delete_speaker(
    speaker_id: UUID,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    speakers_service.delete_speaker(db, speaker_id)
    return Response(status_code=204)
