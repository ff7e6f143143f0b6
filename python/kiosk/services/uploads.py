"""Inline upload decoding, validation, and hand-off to the asset host.

Key invariants:
- Every upload is validated against a per-kind content-type allow-list
- Every upload is capped at MAX_UPLOAD_BYTES (25 MB by default)
- Host failures surface as UploadError and are never retried
"""

import base64
import binascii
import re
from dataclasses import dataclass

from kiosk.config import get_settings
from kiosk.errors import ApiErrorCode, InvalidRequestError, UploadError
from kiosk.logging import get_logger
from kiosk.schemas.common import UploadPayload
from kiosk.storage import AssetHostBase, StorageError, UploadedAsset, build_asset_folder

logger = get_logger(__name__)

# Content type validation
ALLOWED_CONTENT_TYPES: dict[str, tuple[str, ...]] = {
    "image": ("image/jpeg", "image/png", "image/webp", "image/gif"),
    "video": ("video/mp4", "video/mpeg", "video/quicktime"),
    "pdf": ("application/pdf",),
    "qr": ("image/png", "image/webp", "image/jpeg", "application/pdf"),
}

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.S)


@dataclass(frozen=True)
class DecodedUpload:
    """An upload payload after base64 decoding."""

    data: bytes
    content_type: str
    filename: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.data)


def decode_upload(payload: UploadPayload) -> DecodedUpload:
    """Decode an inline upload payload.

    Accepts bare base64 or a data URL. An explicit content_type wins over
    the MIME type embedded in the data URL.

    Raises:
        InvalidRequestError: If the data is not valid base64 or no content type is known.
    """
    raw = payload.data.strip()
    content_type = payload.content_type

    match = DATA_URL_PATTERN.match(raw)
    if match:
        raw = match.group("data")
        content_type = content_type or match.group("mime")

    if not content_type:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_CONTENT_TYPE, "File content type is required"
        )

    try:
        data = base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_FILE, "File data is not valid base64") from e

    if not data:
        raise InvalidRequestError(ApiErrorCode.E_INVALID_FILE, "File is empty")

    return DecodedUpload(data=data, content_type=content_type.lower(), filename=payload.filename)


def validate_upload(kind: str, content_type: str, size_bytes: int) -> None:
    """Validate an upload against the kind's allow-list and the size ceiling.

    Raises:
        InvalidRequestError: If validation fails.
    """
    settings = get_settings()

    valid_types = ALLOWED_CONTENT_TYPES.get(kind)
    if valid_types is None:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_KIND,
            f"Invalid kind '{kind}'. Upload is only supported for "
            f"{', '.join(ALLOWED_CONTENT_TYPES)}.",
        )

    if content_type not in valid_types:
        raise InvalidRequestError(
            ApiErrorCode.E_INVALID_CONTENT_TYPE,
            f"Invalid file type. Expected {', '.join(valid_types)} for {kind}, got {content_type}",
        )

    if size_bytes > settings.max_upload_bytes:
        max_mb = settings.max_upload_bytes // (1024 * 1024)
        raise InvalidRequestError(
            ApiErrorCode.E_FILE_TOO_LARGE,
            f"File too large (max {max_mb}MB)",
        )


def decode_and_validate(kind: str, payload: UploadPayload) -> DecodedUpload:
    """Decode a payload and validate it for the given kind."""
    upload = decode_upload(payload)
    validate_upload(kind, upload.content_type, upload.size_bytes)
    return upload


def push_to_host(host: AssetHostBase, upload: DecodedUpload, *, bucket: str) -> UploadedAsset:
    """Upload to the asset host under the configured folder for `bucket`.

    Raises:
        UploadError: If the host fails. Not retried.
    """
    settings = get_settings()
    folder = build_asset_folder(settings.asset_folder, bucket)
    try:
        asset = host.upload(upload.data, upload.content_type, folder=folder)
    except StorageError as e:
        logger.error(
            "asset_upload_failed",
            folder=folder,
            content_type=upload.content_type,
            size_bytes=upload.size_bytes,
            error=e.message,
        )
        raise UploadError("Failed to upload file") from e

    logger.info("asset_uploaded", asset_id=asset.asset_id, size_bytes=upload.size_bytes)
    return asset
