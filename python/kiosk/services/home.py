"""Kiosk home screen service.

The home configuration is a single row (id=1) created lazily with the
configured default hero video. The same row doubles as the schedule lock:
speaker writers take a row lock on it before reading the timeline.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kiosk.config import get_settings
from kiosk.db.models import KioskHome
from kiosk.db.session import transaction
from kiosk.errors import ApiErrorCode, InvalidRequestError
from kiosk.logging import get_logger
from kiosk.schemas.common import UploadPayload
from kiosk.schemas.home import HomeOut
from kiosk.services.media import normalize_website_url
from kiosk.services.uploads import decode_and_validate, push_to_host
from kiosk.storage import AssetHostBase

logger = get_logger(__name__)

HOME_ID = 1


def _get_or_create_home(db: Session) -> KioskHome:
    home = db.get(KioskHome, HOME_ID)
    if home is not None:
        return home

    home = KioskHome(id=HOME_ID, video_url=get_settings().default_hero_video_url)
    try:
        with transaction(db):
            db.add(home)
    except IntegrityError:
        # Another request created it first
        home = db.get(KioskHome, HOME_ID)
        if home is None:
            raise
        return home

    logger.info("kiosk_home_created", video_url=home.video_url)
    return home


def lock_home_row(db: Session) -> KioskHome:
    """Take a row lock on the home singleton for the current transaction.

    Creates the row first if needed. On PostgreSQL this is SELECT ... FOR
    UPDATE; dialects without row locks ignore the clause.
    """
    _get_or_create_home(db)
    return db.execute(
        select(KioskHome).where(KioskHome.id == HOME_ID).with_for_update()
    ).scalar_one()


def get_home(db: Session) -> HomeOut:
    """Get the home configuration, creating it with defaults if absent."""
    return HomeOut.model_validate(_get_or_create_home(db))


def update_home_video(
    db: Session,
    host: AssetHostBase,
    video_url: str | None = None,
    upload: UploadPayload | None = None,
) -> HomeOut:
    """Replace the hero video with a hosted URL or an uploaded file.

    Exactly one of `video_url` (non-blank) or `upload` must be given.

    Raises:
        InvalidRequestError: Neither or both given, bad URL, or bad video file.
        UploadError: If the asset host fails.
    """
    has_url = bool(video_url and video_url.strip())
    if has_url == (upload is not None):
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_REQUEST,
            "Provide either a video URL or a video file",
        )

    if upload is not None:
        decoded = decode_and_validate("video", upload)
        new_url = push_to_host(host, decoded, bucket="home").url
    else:
        new_url = normalize_website_url(video_url)

    home = _get_or_create_home(db)
    home.video_url = new_url
    with transaction(db):
        db.add(home)

    logger.info("kiosk_home_video_updated", video_url=new_url)
    return HomeOut.model_validate(home)
