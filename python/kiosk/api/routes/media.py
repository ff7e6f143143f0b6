"""Media and website routes.

Routes are transport-only:
- Parse path/query/body
- Call exactly one service function
- Return success(...) or raise ApiError

No domain logic or raw DB access in routes.

IMPORTANT: /media/all must be registered BEFORE /media/{media_id} routes
to prevent path capture.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from kiosk.api.deps import get_asset_host, get_db
from kiosk.auth.middleware import Admin, get_admin
from kiosk.responses import success_response
from kiosk.schemas.media import CreateMediaRequest, CreateWebsiteRequest, UpdateMediaRequest
from kiosk.services import media as media_service
from kiosk.storage import AssetHostBase

router = APIRouter()


@router.get("/media")
def find_media(
    db: Annotated[Session, Depends(get_db)],
    title: Annotated[str | None, Query(description="Exact title, case-insensitive")] = None,
) -> dict:
    """Look up a single media asset by title.

    Errors:
        E_INVALID_REQUEST (400): title missing or blank.
        E_MEDIA_NOT_FOUND (404): no media has that title.
    """
    result = media_service.find_media_by_title(db, title)
    return success_response(result.model_dump(mode="json"))


@router.get("/media/all")
def list_media(db: Annotated[Session, Depends(get_db)]) -> dict:
    """List every media asset, newest first."""
    result = media_service.list_media(db)
    return success_response([media.model_dump(mode="json") for media in result])


@router.post("/media", status_code=201)
def create_media(
    request: CreateMediaRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
    host: Annotated[AssetHostBase, Depends(get_asset_host)],
) -> dict:
    """Create a media asset from an inline upload or a website URL."""
    result = media_service.create_media(
        db,
        host,
        title=request.title,
        kind=request.kind,
        upload=request.file,
        website_url=request.website_url,
    )
    return success_response(result.model_dump(mode="json"))


@router.put("/media/{media_id}")
def update_media(
    media_id: UUID,
    request: UpdateMediaRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
    host: Annotated[AssetHostBase, Depends(get_asset_host)],
) -> dict:
    result = media_service.update_media(
        db,
        host,
        media_id,
        title=request.title,
        kind=request.kind,
        upload=request.file,
        website_url=request.website_url,
    )
    return success_response(result.model_dump(mode="json"))


@router.delete("/media/{media_id}", status_code=204)
def delete_media(
    media_id: UUID,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
    host: Annotated[AssetHostBase, Depends(get_asset_host)],
) -> Response:
    """Delete a media asset.

    Bubbles referencing it are left in place and render without media.
    """
    media_service.delete_media(db, host, media_id)
    return Response(status_code=204)


@router.get("/media/{media_id}/download")
def download_media(
    media_id: UUID,
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Proxy the hosted file back as an attachment.

    Errors:
        E_MEDIA_NOT_FOUND (404), E_MEDIA_FILE_MISSING (404),
        E_DOWNLOAD_FAILED (502): the asset host could not be reached.
    """
    download = media_service.download_media(db, media_id)
    return Response(
        content=download.content,
        media_type=download.content_type,
        headers={"Content-Disposition": media_service.content_disposition(download.filename)},
    )


# =============================================================================
# Websites
# =============================================================================


@router.get("/websites")
def find_website(
    db: Annotated[Session, Depends(get_db)],
    title: Annotated[str | None, Query(description="Exact title, case-insensitive")] = None,
) -> dict:
    result = media_service.find_website_by_title(db, title)
    return success_response(result.model_dump(mode="json"))


@router.post("/websites", status_code=201)
def create_website(
    request: CreateWebsiteRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> dict:
    result = media_service.create_website(db, request.title, request.website_url)
    return success_response(result.model_dump(mode="json"))
