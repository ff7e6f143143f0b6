"""Speaker schedule service layer.

All speaker business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Key invariants:
- No two speakers have overlapping time windows (touching is allowed)
- Every window has start < end; no overnight spans
- Overlap checks and the write that follows run under a row lock on the
  kiosk home singleton, so concurrent schedule writers cannot interleave
- Images are uploaded only after the window has been accepted
"""

from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.orm import Session

from kiosk.config import get_settings
from kiosk.db.models import Speaker
from kiosk.db.session import transaction
from kiosk.errors import ApiErrorCode, ConflictError, InvalidRequestError, NotFoundError
from kiosk.logging import get_logger
from kiosk.schemas.common import UNSET, UploadPayload, Unset
from kiosk.schemas.speaker import LiveSpeakerOut, SpeakerOut
from kiosk.services.home import lock_home_row
from kiosk.services.schedule import (
    find_conflict,
    format_minutes,
    parse_hhmm,
    resolve_live,
    validate_window,
)
from kiosk.services.uploads import decode_and_validate, push_to_host
from kiosk.storage import AssetHostBase

logger = get_logger(__name__)

IMAGE_BUCKET = "speakers"


def _require_text(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, f"{field} is required")
    return value


def _check_conflict(db: Session, start: int, end: int, exclude_id: UUID | None = None) -> None:
    """Raise ConflictError if [start, end) overlaps any stored speaker."""
    query = select(Speaker).order_by(Speaker.start_time.asc())
    if exclude_id is not None:
        query = query.where(Speaker.id != exclude_id)

    conflict = find_conflict(start, end, db.execute(query).scalars().all())
    if conflict is not None:
        logger.info(
            "speaker_schedule_conflict",
            conflicting_speaker_id=str(conflict.id),
            start_time=format_minutes(start),
            end_time=format_minutes(end),
        )
        raise ConflictError(
            ApiErrorCode.E_SCHEDULE_CONFLICT,
            f"Time slot overlaps with {conflict.name} ({conflict.start_time} - "
            f"{conflict.end_time}). Only one speaker can be live at a time.",
        )


def _upload_image(host: AssetHostBase, payload: UploadPayload) -> str:
    decoded = decode_and_validate("image", payload)
    return push_to_host(host, decoded, bucket=IMAGE_BUCKET).url


def get_speaker_or_404(db: Session, speaker_id: UUID) -> Speaker:
    """Get the speaker ORM row or raise NotFoundError."""
    speaker = db.get(Speaker, speaker_id)
    if speaker is None:
        raise NotFoundError(ApiErrorCode.E_SPEAKER_NOT_FOUND, "Speaker not found")
    return speaker


def list_speakers(db: Session) -> list[SpeakerOut]:
    """List all speakers ordered by display order, then start time."""
    rows = db.execute(
        select(Speaker).order_by(Speaker.order.asc(), Speaker.start_time.asc())
    ).scalars().all()
    return [SpeakerOut.model_validate(row) for row in rows]


def get_speaker(db: Session, speaker_id: UUID) -> SpeakerOut:
    return SpeakerOut.model_validate(get_speaker_or_404(db, speaker_id))


def create_speaker(
    db: Session,
    host: AssetHostBase,
    *,
    name: str,
    designation: str,
    thumbnail: UploadPayload,
    start_time: str,
    end_time: str,
    popup: UploadPayload | None = None,
    order: int = 0,
) -> SpeakerOut:
    """Create a speaker after checking the window against the whole schedule.

    Args:
        thumbnail: Card image, required.
        popup: Detail image; the thumbnail URL is reused when omitted.
        start_time: "HH:MM" venue time.
        end_time: "HH:MM" venue time, strictly after start_time.

    Raises:
        InvalidRequestError: Missing fields, bad times, or bad images.
        ConflictError: If the window overlaps an existing speaker.
        UploadError: If the asset host fails.
    """
    name = _require_text(name, "Name")
    designation = _require_text(designation, "Designation")
    if thumbnail is None:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "Thumbnail image is required")
    start, end = validate_window(start_time, end_time)

    with transaction(db):
        lock_home_row(db)
        _check_conflict(db, start, end)

        image_url = _upload_image(host, thumbnail)
        popup_image_url = _upload_image(host, popup) if popup is not None else image_url

        speaker = Speaker(
            name=name,
            designation=designation,
            image_url=image_url,
            popup_image_url=popup_image_url,
            start_time=format_minutes(start),
            end_time=format_minutes(end),
            order=order,
        )
        db.add(speaker)

    logger.info(
        "speaker_created",
        speaker_id=str(speaker.id),
        start_time=speaker.start_time,
        end_time=speaker.end_time,
    )
    return SpeakerOut.model_validate(speaker)


def update_speaker(
    db: Session,
    host: AssetHostBase,
    speaker_id: UUID,
    *,
    name: str | None | Unset = UNSET,
    designation: str | None | Unset = UNSET,
    thumbnail: UploadPayload | None | Unset = UNSET,
    popup: UploadPayload | None | Unset = UNSET,
    start_time: str | None | Unset = UNSET,
    end_time: str | None | Unset = UNSET,
    order: int | None | Unset = UNSET,
) -> SpeakerOut:
    """Partially update a speaker.

    Omitted or null fields keep their stored values; omitted images keep the
    stored URLs. The merged window is re-checked against every other speaker.

    Raises:
        NotFoundError: If the speaker does not exist.
        InvalidRequestError: Blank name/designation, bad times, or bad images.
        ConflictError: If the merged window overlaps another speaker.
        UploadError: If the asset host fails.
    """
    with transaction(db):
        lock_home_row(db)
        speaker = get_speaker_or_404(db, speaker_id)

        new_start = start_time if isinstance(start_time, str) else speaker.start_time
        new_end = end_time if isinstance(end_time, str) else speaker.end_time
        start, end = validate_window(new_start, new_end)

        if isinstance(name, str):
            speaker.name = _require_text(name, "Name")
        if isinstance(designation, str):
            speaker.designation = _require_text(designation, "Designation")

        _check_conflict(db, start, end, exclude_id=speaker_id)

        if isinstance(thumbnail, UploadPayload):
            speaker.image_url = _upload_image(host, thumbnail)
        if isinstance(popup, UploadPayload):
            speaker.popup_image_url = _upload_image(host, popup)

        speaker.start_time = format_minutes(start)
        speaker.end_time = format_minutes(end)
        if isinstance(order, int):
            speaker.order = order

    logger.info("speaker_updated", speaker_id=str(speaker_id))
    return SpeakerOut.model_validate(speaker)


def delete_speaker(db: Session, speaker_id: UUID) -> None:
    """Delete a speaker.

    Raises:
        NotFoundError: If the speaker does not exist.
    """
    speaker = get_speaker_or_404(db, speaker_id)
    with transaction(db):
        db.delete(speaker)

    logger.info("speaker_deleted", speaker_id=str(speaker_id))


def current_venue_minutes() -> int:
    """Minutes since midnight on the venue wall clock."""
    now = datetime.now(ZoneInfo(get_settings().venue_timezone))
    return now.hour * 60 + now.minute


def get_live_speaker(db: Session, at: str | None = None) -> LiveSpeakerOut:
    """Resolve the speaker live at `at` ("HH:MM"), or now in venue time.

    Returns a result with speaker=None when nobody is live.

    Raises:
        InvalidRequestError: If `at` is not a valid time.
    """
    at_minutes = parse_hhmm(at) if at is not None else current_venue_minutes()

    speakers = db.execute(select(Speaker)).scalars().all()
    live = resolve_live(speakers, at_minutes)
    return LiveSpeakerOut(
        at=format_minutes(at_minutes),
        speaker=SpeakerOut.model_validate(live) if live is not None else None,
    )
