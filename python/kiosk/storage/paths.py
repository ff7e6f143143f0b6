"""Asset folder and public id building utilities.

This module provides the single point of logic for naming assets on the
external host. All naming must go through build_asset_folder() and
build_public_id() to keep production and test uploads apart.

Naming Invariant:
    - Production: {root}/{kind}/{asset_uuid}
    - Test: test_runs/{run_id}/{root}/{kind}/{asset_uuid}

Rules:
    - No leading or trailing slash on folders
    - Prefix applied exactly once in build_asset_folder()
"""

import os
from uuid import UUID

# Environment variable for test run prefix
TEST_PREFIX_ENV_VAR = "ASSET_TEST_PREFIX"


def _get_test_prefix() -> str:
    """Get the test prefix from environment.

    Returns:
        Empty string in production, "test_runs/{run_id}/" in test.
    """
    prefix = os.environ.get(TEST_PREFIX_ENV_VAR, "")
    if prefix and not prefix.endswith("/"):
        prefix = f"{prefix}/"
    return prefix


def build_asset_folder(root: str, kind: str) -> str:
    """Build the host folder for an asset of the given kind.

    Args:
        root: Configured asset folder root (e.g. "kiosk").
        kind: Media kind or logical bucket ("image", "speakers", "home").

    Returns:
        Folder path such as "kiosk/image".
    """
    root = root.strip("/")
    return f"{_get_test_prefix()}{root}/{kind}"


def build_public_id(folder: str, asset_uuid: UUID | str) -> str:
    """Build the full public id for an asset.

    Example:
        >>> build_public_id("kiosk/pdf", "0b7c...")
        'kiosk/pdf/0b7c...'
    """
    return f"{folder.rstrip('/')}/{asset_uuid}"


def split_asset_id(asset_id: str) -> tuple[str, str]:
    """Split a stored asset id into (resource_type, public_id).

    Stored asset ids have the form "{resource_type}/{public_id}".

    Raises:
        ValueError: If the asset id has no resource type segment.
    """
    resource_type, sep, public_id = asset_id.partition("/")
    if not sep or not public_id:
        raise ValueError(f"Malformed asset id '{asset_id}'")
    return resource_type, public_id
