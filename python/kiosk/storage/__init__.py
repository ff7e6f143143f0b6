"""Storage module for external asset host operations.

Provides:
- AssetHostBase and its Cloudinary / in-memory implementations
- Folder and public id naming utilities
- Test isolation support via configurable prefixes
"""

from kiosk.storage.client import (
    AssetHostBase,
    CloudinaryAssetHost,
    FakeAssetHost,
    StorageError,
    UploadedAsset,
    create_asset_host,
)
from kiosk.storage.paths import build_asset_folder, build_public_id

__all__ = [
    "AssetHostBase",
    "CloudinaryAssetHost",
    "FakeAssetHost",
    "StorageError",
    "UploadedAsset",
    "create_asset_host",
    "build_asset_folder",
    "build_public_id",
]
