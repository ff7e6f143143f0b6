"""Tests for inline upload decoding and validation."""

import base64

import pytest

from kiosk.errors import ApiError, UploadError
from kiosk.schemas.common import UploadPayload
from kiosk.services.uploads import (
    decode_and_validate,
    decode_upload,
    push_to_host,
    validate_upload,
)
from kiosk.storage import FakeAssetHost
from tests.helpers import PNG_BYTES


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


class TestDecodeUpload:
    def test_bare_base64_with_content_type(self):
        upload = decode_upload(UploadPayload(data=_b64(PNG_BYTES), content_type="IMAGE/PNG"))

        assert upload.data == PNG_BYTES
        assert upload.content_type == "image/png"
        assert upload.size_bytes == len(PNG_BYTES)

    def test_data_url_supplies_content_type(self):
        upload = decode_upload(UploadPayload(data=f"data:image/webp;base64,{_b64(PNG_BYTES)}"))

        assert upload.content_type == "image/webp"

    def test_explicit_content_type_wins_over_data_url(self):
        payload = UploadPayload(
            data=f"data:image/webp;base64,{_b64(PNG_BYTES)}", content_type="image/png"
        )

        assert decode_upload(payload).content_type == "image/png"

    def test_missing_content_type(self):
        with pytest.raises(ApiError) as exc:
            decode_upload(UploadPayload(data=_b64(PNG_BYTES)))
        assert exc.value.code.value == "E_INVALID_CONTENT_TYPE"

    def test_invalid_base64(self):
        with pytest.raises(ApiError) as exc:
            decode_upload(UploadPayload(data="not base64!!", content_type="image/png"))
        assert exc.value.code.value == "E_INVALID_FILE"


class TestValidateUpload:
    @pytest.mark.parametrize(
        ("kind", "content_type"),
        [
            ("image", "image/gif"),
            ("video", "video/quicktime"),
            ("pdf", "application/pdf"),
            ("qr", "image/png"),
            ("qr", "application/pdf"),
        ],
    )
    def test_allowed(self, kind: str, content_type: str):
        validate_upload(kind, content_type, 10)

    @pytest.mark.parametrize(
        ("kind", "content_type"),
        [("image", "application/pdf"), ("pdf", "image/png"), ("qr", "image/gif")],
    )
    def test_disallowed_content_type(self, kind: str, content_type: str):
        with pytest.raises(ApiError) as exc:
            validate_upload(kind, content_type, 10)
        assert exc.value.code.value == "E_INVALID_CONTENT_TYPE"

    def test_website_is_not_an_upload_kind(self):
        with pytest.raises(ApiError) as exc:
            validate_upload("website", "text/html", 10)
        assert exc.value.code.value == "E_INVALID_KIND"

    def test_default_ceiling_is_25mb(self):
        validate_upload("video", "video/mp4", 25 * 1024 * 1024)

        with pytest.raises(ApiError) as exc:
            validate_upload("video", "video/mp4", 25 * 1024 * 1024 + 1)
        assert exc.value.code.value == "E_FILE_TOO_LARGE"
        assert exc.value.message == "File too large (max 25MB)"


class TestPushToHost:
    def test_uses_configured_folder(self):
        host = FakeAssetHost()
        upload = decode_and_validate(
            "image", UploadPayload(data=_b64(PNG_BYTES), content_type="image/png")
        )

        asset = push_to_host(host, upload, bucket="speakers")

        assert "/kiosk/speakers/" in asset.url
        assert host.get_asset(asset.asset_id) == PNG_BYTES

    def test_host_failure_becomes_upload_error(self):
        host = FakeAssetHost()
        host.fail_uploads = True
        upload = decode_and_validate(
            "image", UploadPayload(data=_b64(PNG_BYTES), content_type="image/png")
        )

        with pytest.raises(UploadError) as exc:
            push_to_host(host, upload, bucket="image")
        assert exc.value.status_code == 500
