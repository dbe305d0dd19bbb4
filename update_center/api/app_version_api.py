from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from update_center.api.deps import http_error
from update_center.core.errors import UpdateCenterError
from update_center.database.session import get_db
from update_center.models.app_version import Platform, UpdateType, VersionStatus
from update_center.schemas.app_version import (
    AppVersionCreate, AppVersionUpdate, AppVersionPublish, AppVersionResponse, AppVersionListResponse,
    PackageCreate, PackageUpdate, PackageResponse, StoreDefaultsResponse,
)
from update_center.services.app_version_service import AppVersionService
from update_center.services.package_service import PackageService
from update_center.utils.security import require_permission

router = APIRouter(prefix="/admin/app-versions", tags=["admin-app-versions"])

can_view = require_permission("app_versions", "view")
can_manage = require_permission("app_versions", "manage")


def _user(current_user: dict) -> str:
    return str(current_user.get("sub", "unknown"))


@router.get("/", response_model=AppVersionListResponse)
async def list_versions(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    keyword: Optional[str] = None,
    platform: Optional[Platform] = None,
    status: Optional[VersionStatus] = None,
    update_type: Optional[UpdateType] = None,
    current_user: dict = Depends(can_view),
    db: Session = Depends(get_db)
):
    versions, total = AppVersionService.list_versions(
        db, page, page_size, keyword=keyword, platform=platform, status=status, update_type=update_type
    )
    return {"list": versions, "total": total, "page": page, "page_size": page_size}


@router.get("/stats")
async def version_stats(
    current_user: dict = Depends(can_view),
    db: Session = Depends(get_db)
):
    return AppVersionService.get_stats(db)


@router.get("/store-defaults", response_model=StoreDefaultsResponse)
async def store_defaults(current_user: dict = Depends(can_view)):
    return PackageService.store_defaults()


@router.get("/{version_id}", response_model=AppVersionResponse)
async def get_version(
    version_id: str,
    current_user: dict = Depends(can_view),
    db: Session = Depends(get_db)
):
    try:
        return AppVersionService.get_version(db, version_id)
    except UpdateCenterError as e:
        raise http_error(e)


@router.post("/", response_model=AppVersionResponse, status_code=status.HTTP_201_CREATED)
async def create_version(
    version_data: AppVersionCreate,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    """Create a draft version"""
    try:
        return AppVersionService.create_version(db, version_data, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.patch("/{version_id}", response_model=AppVersionResponse)
async def update_version(
    version_id: str,
    version_data: AppVersionUpdate,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        return AppVersionService.update_version(db, version_id, version_data, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.delete("/{version_id}")
async def delete_version(
    version_id: str,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        AppVersionService.delete_version(db, version_id, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)
    return {"message": "Version deleted"}


@router.post("/{version_id}/publish", response_model=AppVersionResponse)
async def publish_version(
    version_id: str,
    publish_data: Optional[AppVersionPublish] = None,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    release_date = publish_data.release_date if publish_data else None
    try:
        return AppVersionService.publish_version(db, version_id, release_date, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.post("/{version_id}/archive", response_model=AppVersionResponse)
async def archive_version(
    version_id: str,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        return AppVersionService.archive_version(db, version_id, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.get("/{version_id}/packages", response_model=List[PackageResponse])
async def list_packages(
    version_id: str,
    current_user: dict = Depends(can_view),
    db: Session = Depends(get_db)
):
    try:
        return PackageService.list_packages(db, version_id)
    except UpdateCenterError as e:
        raise http_error(e)


@router.post("/{version_id}/packages", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
async def create_package(
    version_id: str,
    package_data: PackageCreate,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        return PackageService.create_package(db, version_id, package_data, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.patch("/{version_id}/packages/{package_id}", response_model=PackageResponse)
async def update_package(
    version_id: str,
    package_id: str,
    package_data: PackageUpdate,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        return PackageService.update_package(db, version_id, package_id, package_data, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.post("/{version_id}/packages/{package_id}/toggle", response_model=PackageResponse)
async def toggle_package(
    version_id: str,
    package_id: str,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        return PackageService.toggle_package(db, version_id, package_id, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)


@router.delete("/{version_id}/packages/{package_id}")
async def delete_package(
    version_id: str,
    package_id: str,
    current_user: dict = Depends(can_manage),
    db: Session = Depends(get_db)
):
    try:
        PackageService.delete_package(db, version_id, package_id, user=_user(current_user))
    except UpdateCenterError as e:
        raise http_error(e)
    return {"message": "Package deleted"}
