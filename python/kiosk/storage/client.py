"""Asset host client abstraction.

Provides a clean interface for pushing kiosk assets (images, videos, PDFs,
QR codes) to the external media host and removing them again:
- upload(): store bytes and return the permanent public URL
- delete(): best-effort removal of a previously uploaded asset

The production client speaks the Cloudinary upload API with signed requests.
"""

import hashlib
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from uuid import uuid4

import httpx

from kiosk.logging import get_logger
from kiosk.storage.paths import build_public_id, split_asset_id

logger = get_logger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


@dataclass(frozen=True)
class UploadedAsset:
    """Result of a successful upload.

    Attributes:
        url: Permanent HTTPS URL of the hosted asset.
        asset_id: Host identifier, "{resource_type}/{public_id}".
    """

    url: str
    asset_id: str


class StorageError(Exception):
    """Asset host operation error."""

    def __init__(self, message: str, code: str = "E_STORAGE_ERROR"):
        super().__init__(message)
        self.message = message
        self.code = code


class AssetHostBase(ABC):
    """Abstract base class for asset host implementations."""

    @abstractmethod
    def upload(self, data: bytes, content_type: str, *, folder: str) -> UploadedAsset:
        """Upload bytes to the host.

        Args:
            data: Raw file content.
            content_type: Declared MIME type of the content.
            folder: Host folder to place the asset in.

        Returns:
            UploadedAsset with the permanent URL and host id.

        Raises:
            StorageError: If the host rejects the upload or is unreachable.
        """
        ...

    @abstractmethod
    def delete(self, asset_id: str) -> None:
        """Delete an asset from the host.

        Best-effort operation - logs errors but doesn't raise.

        Args:
            asset_id: Id returned by upload().
        """
        ...


def resource_type_for(content_type: str) -> str:
    """Map a MIME type to the Cloudinary resource type."""
    if content_type.startswith("video/"):
        return "video"
    if content_type.startswith("image/") or content_type == "application/pdf":
        return "image"
    return "raw"


def sign_params(params: dict[str, str], api_secret: str) -> str:
    """Compute a Cloudinary request signature.

    Parameters are sorted by name, joined as k=v with '&', suffixed with the
    API secret, and SHA-1 hashed.
    """
    to_sign = "&".join(f"{k}={v}" for k, v in sorted(params.items()) if v != "")
    return hashlib.sha1(f"{to_sign}{api_secret}".encode()).hexdigest()


class CloudinaryAssetHost(AssetHostBase):
    """Production asset host backed by Cloudinary.

    Uses httpx for HTTP operations against the Cloudinary upload API.
    """

    def __init__(
        self,
        cloud_name: str,
        api_key: str,
        api_secret: str,
        timeout: float = 60.0,
    ):
        self._cloud_name = cloud_name
        self._api_key = api_key
        self._api_secret = api_secret
        self._timeout = timeout
        self._base_url = f"{CLOUDINARY_API_BASE}/{cloud_name}"

    def _signed_form(self, params: dict[str, str]) -> dict[str, str]:
        params = {**params, "timestamp": str(int(time.time()))}
        return {
            **params,
            "api_key": self._api_key,
            "signature": sign_params(params, self._api_secret),
        }

    def upload(self, data: bytes, content_type: str, *, folder: str) -> UploadedAsset:
        """Upload via POST /{resource_type}/upload."""
        resource_type = resource_type_for(content_type)
        public_id = build_public_id(folder, uuid4())
        url = f"{self._base_url}/{resource_type}/upload"
        form = self._signed_form({"public_id": public_id})

        try:
            with httpx.Client(timeout=self._timeout) as client:
                response = client.post(
                    url,
                    data=form,
                    files={"file": (public_id.rsplit("/", 1)[-1], data, content_type)},
                )
        except httpx.HTTPError as e:
            raise StorageError(f"Asset host unreachable: {e}", code="E_UPLOAD_FAILED") from e

        if response.status_code != 200:
            raise StorageError(
                f"Asset upload failed: {response.status_code} {response.text}",
                code="E_UPLOAD_FAILED",
            )

        body = response.json()
        secure_url = body.get("secure_url")
        if not secure_url:
            raise StorageError("Asset upload failed: missing secure_url", code="E_UPLOAD_FAILED")

        returned_type = body.get("resource_type", resource_type)
        returned_id = body.get("public_id", public_id)
        return UploadedAsset(url=secure_url, asset_id=f"{returned_type}/{returned_id}")

    def delete(self, asset_id: str) -> None:
        """Delete via POST /{resource_type}/destroy (best-effort)."""
        try:
            resource_type, public_id = split_asset_id(asset_id)
            with httpx.Client(timeout=self._timeout) as client:
                response = client.post(
                    f"{self._base_url}/{resource_type}/destroy",
                    data=self._signed_form({"public_id": public_id}),
                )
            if response.status_code not in (200, 404):
                logger.warning(
                    "asset_delete_failed",
                    asset_id=asset_id,
                    status_code=response.status_code,
                )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("asset_delete_error", asset_id=asset_id, error=str(e))


class FakeAssetHost(AssetHostBase):
    """Fake asset host for testing and local development without Cloudinary.

    Stores assets in memory and provides deterministic URLs.
    """

    def __init__(self):
        self._assets: dict[str, tuple[bytes, str]] = {}  # asset_id -> (content, content_type)
        self.fail_uploads = False

    def upload(self, data: bytes, content_type: str, *, folder: str) -> UploadedAsset:
        """Store the asset in memory."""
        if self.fail_uploads:
            raise StorageError("Fake asset host configured to fail", code="E_UPLOAD_FAILED")
        resource_type = resource_type_for(content_type)
        public_id = build_public_id(folder, uuid4())
        asset_id = f"{resource_type}/{public_id}"
        self._assets[asset_id] = (data, content_type)
        return UploadedAsset(
            url=f"https://fake-assets.test/{resource_type}/upload/{public_id}",
            asset_id=asset_id,
        )

    def delete(self, asset_id: str) -> None:
        """Delete fake asset."""
        self._assets.pop(asset_id, None)

    # Test helper methods

    def get_asset(self, asset_id: str) -> bytes | None:
        """Get asset content directly (test helper)."""
        if asset_id not in self._assets:
            return None
        return self._assets[asset_id][0]

    def asset_count(self) -> int:
        """Number of stored assets (test helper)."""
        return len(self._assets)

    def clear(self) -> None:
        """Clear all stored assets (test helper)."""
        self._assets.clear()


def create_asset_host(settings) -> AssetHostBase:
    """Create the configured asset host.

    Returns:
        CloudinaryAssetHost if all Cloudinary credentials are set,
        FakeAssetHost otherwise.
    """
    if settings.cloudinary_configured:
        return CloudinaryAssetHost(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
        )

    logger.warning("asset_host_fake_in_use", env=settings.kiosk_env.value)
    return FakeAssetHost()
