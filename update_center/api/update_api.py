from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import Optional

from update_center.api.deps import get_update_resolver, http_error
from update_center.config import settings
from update_center.core.errors import NotFoundError
from update_center.models.app_version import Platform
from update_center.schemas.update import CheckUpdateRequest
from update_center.services.update_service import UpdateResolver

router = APIRouter(prefix="/app/update", tags=["app-update"])


def _envelope(message: str, data) -> dict:
    return {
        "success": True,
        "code": status.HTTP_200_OK,
        "message": message,
        "data": data,
    }


@router.post("/check")
async def check_update(
    check_request: CheckUpdateRequest,
    resolver: UpdateResolver = Depends(get_update_resolver)
):
    """Check whether the calling client should update (public)"""
    result = resolver.check_update(check_request)
    message = "New version available" if result.need_update else "Already up to date"
    return _envelope(message, result.model_dump(mode="json", exclude_none=True))


@router.get("/latest")
async def get_latest_version(
    platform: Optional[Platform] = None,
    channel: Optional[str] = Query(None, max_length=50),
    language: Optional[str] = Query(None, max_length=20),
    resolver: UpdateResolver = Depends(get_update_resolver)
):
    """Latest published version, gray releases included (public)"""
    try:
        latest = resolver.get_latest_version(platform, channel, language)
    except NotFoundError as e:
        raise http_error(e)
    return _envelope("Latest version fetched", latest.model_dump(mode="json", by_alias=True))


@router.get("/history")
async def get_version_history(
    platform: Optional[Platform] = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, alias="pageSize"),
    language: Optional[str] = Query(None, max_length=20),
    resolver: UpdateResolver = Depends(get_update_resolver)
):
    """Published release history (public)"""
    if page_size > settings.HISTORY_MAX_PAGE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"pageSize must not exceed {settings.HISTORY_MAX_PAGE_SIZE}"
        )
    history = resolver.get_version_history(platform, page, page_size, language)
    return _envelope("Version history fetched", history.model_dump(mode="json", by_alias=True))
