"""Kiosk home screen routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from kiosk.api.deps import get_asset_host, get_db
from kiosk.auth.middleware import Admin, get_admin
from kiosk.responses import success_response
from kiosk.schemas.home import UpdateHomeRequest
from kiosk.services import home as home_service
from kiosk.storage import AssetHostBase

router = APIRouter()


@router.get("/home")
def get_home(db: Annotated[Session, Depends(get_db)]) -> dict:
    """Get the home configuration, creating the default on first read."""
    result = home_service.get_home(db)
    return success_response(result.model_dump(mode="json"))


@router.put("/home")
def update_home(
    request: UpdateHomeRequest,
    admin: Annotated[Admin, Depends(get_admin)],
    db: Annotated[Session, Depends(get_db)],
    host: Annotated[AssetHostBase, Depends(get_asset_host)],
) -> dict:
    """Replace the hero video with a URL or an uploaded video file."""
    result = home_service.update_home_video(
        db, host, video_url=request.video_url, upload=request.video
    )
    return success_response(result.model_dump(mode="json"))
