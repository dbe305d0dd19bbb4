from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime

from update_center.models.app_version import Platform, UpdateType

SEMVER_PATTERN = r'^\d+\.\d+\.\d+$'


class CheckUpdateRequest(BaseModel):
    platform: Optional[Platform] = None
    current_version: str = Field(..., pattern=SEMVER_PATTERN, examples=["1.2.3"])
    channel: Optional[str] = Field(None, max_length=50, examples=["official"])
    device_id: Optional[str] = Field(None, max_length=255)
    language: Optional[str] = Field(None, max_length=20, examples=["zh-CN"])


class CheckUpdateResponse(BaseModel):
    need_update: bool
    latest_version: Optional[str] = None
    update_type: Optional[UpdateType] = None
    title: Optional[str] = None
    description: Optional[str] = None
    download_url: Optional[str] = None
    file_size: Optional[int] = None
    checksum: Optional[str] = None
    min_support_version: Optional[str] = None


class _CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LatestVersionResponse(_CamelModel):
    version: str
    version_code: int
    platform: Optional[Platform] = None
    title: str
    description: str
    update_type: UpdateType
    release_date: Optional[datetime] = None
    download_url: str = ""
    file_size: int = 0
    checksum: Optional[str] = None
    min_support_version: Optional[str] = None


class VersionHistoryItem(_CamelModel):
    version: str
    version_code: int
    platform: Optional[Platform] = None
    title: str
    description: str
    update_type: UpdateType
    release_date: Optional[datetime] = None


class VersionHistoryResponse(_CamelModel):
    list: List[VersionHistoryItem]
    total: int
    page: int
    page_size: int
