from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from update_center.core import version_codec
from update_center.models.app_version import Platform, UpdateType, VersionStatus
from update_center.schemas.update import SEMVER_PATTERN

CHECKSUM_PATTERN = r'^[A-Za-z0-9]+:[0-9A-Fa-f]+$'


def _check_encodable(value: Optional[str]) -> Optional[str]:
    if value is not None and not version_codec.is_encodable(value):
        raise ValueError("minor and patch components must be below 100")
    return value


def _reject_null(value):
    # omitted fields are left alone; an explicit null would clear a required column
    if value is None:
        raise ValueError("may be omitted but not set to null")
    return value


class AppVersionBase(BaseModel):
    platform: Optional[Platform] = None
    version: str = Field(..., pattern=SEMVER_PATTERN)
    update_type: UpdateType = UpdateType.OPTIONAL
    title: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    i18n_description: Optional[Dict[str, str]] = None
    min_support_version: Optional[str] = Field(None, pattern=SEMVER_PATTERN)
    gray_release: bool = False
    gray_percent: int = Field(0, ge=0, le=100)
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("version", "min_support_version")
    @classmethod
    def check_versions_encodable(cls, value):
        return _check_encodable(value)


class AppVersionCreate(AppVersionBase):
    release_date: Optional[datetime] = None


class AppVersionUpdate(BaseModel):
    platform: Optional[Platform] = None
    version: Optional[str] = Field(None, pattern=SEMVER_PATTERN)
    update_type: Optional[UpdateType] = None
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    i18n_description: Optional[Dict[str, str]] = None
    min_support_version: Optional[str] = Field(None, pattern=SEMVER_PATTERN)
    gray_release: Optional[bool] = None
    gray_percent: Optional[int] = Field(None, ge=0, le=100)
    release_date: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("version", "min_support_version")
    @classmethod
    def check_versions_encodable(cls, value):
        return _check_encodable(value)

    @field_validator("version", "update_type", "title", "description", "gray_release", "gray_percent")
    @classmethod
    def check_required_not_null(cls, value):
        return _reject_null(value)


class AppVersionPublish(BaseModel):
    release_date: Optional[datetime] = None


class PackageBase(BaseModel):
    channel: str = Field(..., min_length=1, max_length=50)
    download_url: Optional[str] = Field(None, max_length=1000)
    file_size: int = Field(0, ge=0)
    checksum: Optional[str] = Field(None, pattern=CHECKSUM_PATTERN, max_length=255)
    enabled: bool = True


class PackageCreate(PackageBase):
    pass


class PackageUpdate(BaseModel):
    download_url: Optional[str] = Field(None, min_length=1, max_length=1000)
    file_size: Optional[int] = Field(None, ge=0)
    checksum: Optional[str] = Field(None, pattern=CHECKSUM_PATTERN, max_length=255)
    enabled: Optional[bool] = None

    @field_validator("download_url", "file_size", "enabled")
    @classmethod
    def check_required_not_null(cls, value):
        return _reject_null(value)


class PackageResponse(BaseModel):
    id: str
    version_id: str
    channel: str
    download_url: str
    file_size: int
    checksum: Optional[str]
    enabled: bool
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class AppVersionResponse(BaseModel):
    id: str
    platform: Optional[Platform]
    version: str
    version_code: int
    update_type: UpdateType
    title: str
    description: str
    i18n_description: Optional[Dict[str, str]]
    min_support_version: Optional[str]
    min_support_version_code: Optional[int]
    status: VersionStatus
    gray_release: bool
    gray_percent: int
    release_date: Optional[datetime]
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="extra_metadata")
    packages: List[PackageResponse] = []
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class AppVersionListResponse(BaseModel):
    list: List[AppVersionResponse]
    total: int
    page: int
    page_size: int


class StoreDefaultsResponse(BaseModel):
    app_store_url: str
    google_play_url: str
