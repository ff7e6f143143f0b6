"""Media service layer.

All media-domain business logic lives here.
Routes may not contain domain logic or raw DB access - they must call these functions.

Deleting media never cascades: bubbles that reference it keep a dangling
media_id and render without content.
"""

import mimetypes
import unicodedata
from dataclasses import dataclass
from urllib.parse import quote, urlparse
from uuid import UUID

import httpx
from sqlalchemy import select
from sqlalchemy.orm import Session

from kiosk.config import get_settings
from kiosk.db.models import UPLOAD_KINDS, Media, MediaKind, title_lookup_key
from kiosk.db.session import transaction
from kiosk.errors import ApiError, ApiErrorCode, InvalidRequestError, NotFoundError
from kiosk.logging import get_logger
from kiosk.schemas.common import UploadPayload
from kiosk.schemas.media import MediaOut
from kiosk.services.uploads import decode_and_validate, push_to_host
from kiosk.storage import AssetHostBase

logger = get_logger(__name__)

VALID_KINDS = tuple(kind.value for kind in MediaKind)


@dataclass(frozen=True)
class MediaDownload:
    """A hosted media file fetched for forced download."""

    content: bytes
    content_type: str
    filename: str


def _require_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise InvalidRequestError(ApiErrorCode.E_TITLE_REQUIRED, "Title is required")
    return title


def _require_kind(kind: str | None) -> str:
    kind = (kind or "").strip().lower()
    if not kind:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_KIND, "Type is required")
    if kind not in VALID_KINDS:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_KIND,
            f"Invalid type: {kind}. Allowed types: {', '.join(VALID_KINDS)}",
        )
    return kind


def normalize_website_url(website_url: str | None) -> str:
    """Normalize a website URL for kiosk display.

    Adds an https:// scheme when none is given and requires a host.

    Raises:
        InvalidRequestError: If the URL is blank or malformed.
    """
    url = (website_url or "").strip()
    if not url:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_URL, "Website URL is required")

    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"

    parsed = urlparse(url)
    host = parsed.hostname or ""
    if not host or " " in url or ("." not in host and host != "localhost"):
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_URL,
            "Invalid URL format. Please enter a valid website URL",
        )
    return url


def get_media_or_404(db: Session, media_id: UUID) -> Media:
    """Get the media ORM row or raise NotFoundError."""
    media = db.get(Media, media_id)
    if media is None:
        raise NotFoundError(ApiErrorCode.E_MEDIA_NOT_FOUND, "Media not found")
    return media


def media_exists(db: Session, media_id: UUID) -> bool:
    return db.execute(select(Media.id).where(Media.id == media_id)).first() is not None


def _commit_or_discard(
    db: Session, host: AssetHostBase, media: Media, pushed_asset_id: str | None
) -> None:
    """Commit the media row; if that fails, drop the asset just pushed for it."""
    try:
        with transaction(db):
            db.add(media)
    except Exception:
        if pushed_asset_id:
            logger.warning("media_commit_failed_asset_discarded", asset_id=pushed_asset_id)
            host.delete(pushed_asset_id)
        raise


def create_media(
    db: Session,
    host: AssetHostBase,
    title: str,
    kind: str,
    upload: UploadPayload | None = None,
    website_url: str | None = None,
) -> MediaOut:
    """Create a media asset.

    Upload kinds push the decoded file to the asset host and record the
    returned URL. kind=website records a normalized website URL instead.

    Raises:
        InvalidRequestError: Missing title, unknown kind, bad file or URL.
        UploadError: If the asset host fails.
    """
    title = _require_title(title)
    kind = _require_kind(kind)

    media = Media(title=title, kind=kind)

    if kind == MediaKind.website.value:
        media.website_url = normalize_website_url(website_url)
    else:
        if upload is None:
            raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "No file uploaded")
        decoded = decode_and_validate(kind, upload)
        asset = push_to_host(host, decoded, bucket=kind)
        media.url = asset.url
        media.asset_id = asset.asset_id
        media.content_type = decoded.content_type

    _commit_or_discard(db, host, media, media.asset_id)

    logger.info("media_created", media_id=str(media.id), kind=kind)
    return MediaOut.model_validate(media)


def create_website(db: Session, title: str, website_url: str) -> MediaOut:
    """Create a kind=website media entry. No asset host is involved."""
    media = Media(
        title=_require_title(title),
        kind=MediaKind.website.value,
        website_url=normalize_website_url(website_url),
    )

    with transaction(db):
        db.add(media)

    logger.info("media_created", media_id=str(media.id), kind=media.kind)
    return MediaOut.model_validate(media)


def _find_by_title_query(title: str):
    return (
        select(Media)
        .where(Media.title_key == title_lookup_key(title))
        .order_by(Media.created_at.asc())
        .limit(1)
    )


def find_media_by_title(db: Session, title: str | None) -> MediaOut:
    """Find media by exact, case-insensitive title.

    Raises:
        InvalidRequestError: If title is blank.
        NotFoundError: If no media has that title.
    """
    if not title or not title.strip():
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Title parameter is required")

    media = db.execute(_find_by_title_query(title)).scalar_one_or_none()
    if media is None:
        raise NotFoundError(ApiErrorCode.E_MEDIA_NOT_FOUND, "Media not found")
    return MediaOut.model_validate(media)


def find_website_by_title(db: Session, title: str | None) -> MediaOut:
    """Find a website entry by exact, case-insensitive title."""
    if not title or not title.strip():
        raise InvalidRequestError(ApiErrorCode.E_INVALID_REQUEST, "Title parameter is required")

    query = _find_by_title_query(title).where(
        Media.kind == MediaKind.website.value,
        Media.website_url.is_not(None),
    )
    media = db.execute(query).scalar_one_or_none()
    if media is None:
        raise NotFoundError(ApiErrorCode.E_MEDIA_NOT_FOUND, "Website not found")
    return MediaOut.model_validate(media)


def list_media(db: Session) -> list[MediaOut]:
    """List all media, newest first."""
    rows = db.execute(select(Media).order_by(Media.created_at.desc())).scalars().all()
    return [MediaOut.model_validate(row) for row in rows]


def update_media(
    db: Session,
    host: AssetHostBase,
    media_id: UUID,
    title: str | None = None,
    kind: str | None = None,
    upload: UploadPayload | None = None,
    website_url: str | None = None,
) -> MediaOut:
    """Update a media asset in place.

    Blank title or kind keep the stored values. A new file is validated
    against the resulting kind and re-uploaded; without one the stored URL
    is kept.

    Raises:
        NotFoundError: If the media does not exist.
        InvalidRequestError: Bad kind, file, or URL.
        UploadError: If the asset host fails.
    """
    media = get_media_or_404(db, media_id)

    new_title = (title or "").strip() or media.title
    new_kind = _require_kind(kind) if kind and kind.strip() else media.kind

    new_website_url = media.website_url
    if website_url is not None:
        new_website_url = normalize_website_url(website_url)
    if new_kind == MediaKind.website.value and not new_website_url:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_URL, "Website URL is required")

    decoded = decode_and_validate(new_kind, upload) if upload is not None else None
    if decoded is None and MediaKind(new_kind) in UPLOAD_KINDS and not media.url:
        raise InvalidRequestError(ApiErrorCode.E_FILE_REQUIRED, "No file uploaded")

    replaced_asset_id = None
    pushed_asset_id = None
    if decoded is not None:
        asset = push_to_host(host, decoded, bucket=new_kind)
        replaced_asset_id = media.asset_id
        media.url = asset.url
        media.asset_id = asset.asset_id
        pushed_asset_id = asset.asset_id
        media.content_type = decoded.content_type

    media.title = new_title
    media.kind = new_kind
    media.website_url = new_website_url

    _commit_or_discard(db, host, media, pushed_asset_id)

    if replaced_asset_id:
        host.delete(replaced_asset_id)

    logger.info("media_updated", media_id=str(media.id), kind=new_kind)
    return MediaOut.model_validate(media)


def delete_media(db: Session, host: AssetHostBase, media_id: UUID) -> None:
    """Delete a media record. Remote asset removal is best-effort.

    Raises:
        NotFoundError: If the media does not exist.
    """
    media = get_media_or_404(db, media_id)
    asset_id = media.asset_id

    with transaction(db):
        db.delete(media)

    if asset_id:
        host.delete(asset_id)

    logger.info("media_deleted", media_id=str(media_id))


def _download_filename(title: str, content_type: str) -> str:
    ext = mimetypes.guess_extension(content_type) or ""
    # Control characters (CR/LF included) never reach the header
    base = "".join(ch for ch in (title or "") if ch.isprintable())
    base = base.replace('"', "").replace("/", "-").replace("\\", "-").strip() or "document"
    if ext and base.lower().endswith(ext):
        return base
    return f"{base}{ext}"


def content_disposition(filename: str) -> str:
    """Build an attachment Content-Disposition header value.

    Header values are latin-1 on the wire, so non-ASCII names get an ASCII
    `filename` fallback plus an RFC 5987 `filename*` with the UTF-8 name.
    """
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode()
    fallback = " ".join(fallback.split())
    if not fallback or fallback.startswith("."):
        fallback = f"download{fallback}"

    value = f'attachment; filename="{fallback}"'
    if fallback != filename:
        value += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return value


def download_media(db: Session, media_id: UUID) -> MediaDownload:
    """Fetch a hosted media file so it can be served as an attachment.

    Raises:
        NotFoundError: If the media does not exist or has no hosted file.
        ApiError(E_DOWNLOAD_FAILED): If the asset host cannot be reached.
    """
    settings = get_settings()
    media = get_media_or_404(db, media_id)

    if not media.url:
        raise NotFoundError(ApiErrorCode.E_MEDIA_FILE_MISSING, "No file URL available")

    try:
        with httpx.Client(timeout=settings.download_timeout_s, follow_redirects=True) as client:
            response = client.get(media.url)
    except httpx.HTTPError as e:
        logger.error("media_download_failed", media_id=str(media_id), error=str(e))
        raise ApiError(ApiErrorCode.E_DOWNLOAD_FAILED, "Failed to fetch media file") from e

    if response.status_code != 200:
        logger.error(
            "media_download_failed",
            media_id=str(media_id),
            status_code=response.status_code,
        )
        raise ApiError(ApiErrorCode.E_DOWNLOAD_FAILED, "Failed to fetch media file")

    content_type = (
        response.headers.get("content-type", "").split(";")[0].strip()
        or media.content_type
        or "application/octet-stream"
    )
    return MediaDownload(
        content=response.content,
        content_type=content_type,
        filename=_download_filename(media.title, content_type),
    )
