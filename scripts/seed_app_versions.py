#!/usr/bin/env python3
"""Seed a demo catalog through the administrative lifecycle"""
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from update_center.core.errors import ConflictError
from update_center.database.session import SessionLocal, engine, Base
from update_center.models.app_version import Platform, UpdateType, VersionStatus
from update_center.schemas.app_version import AppVersionCreate, PackageCreate
from update_center.services.app_version_service import AppVersionService
from update_center.services.package_service import PackageService

SEED_VERSIONS: List[Dict[str, Any]] = [
    {
        "version": {
            "platform": Platform.ANDROID,
            "version": "1.0.0",
            "title": "v1.0.0 Initial release",
            "description": "## Initial Release\n\n- Core features launched",
            "i18n_description": {"zh-CN": "## 首次发布\n\n- 基础功能上线"},
            "release_date": datetime(2025, 6, 1, tzinfo=timezone.utc),
        },
        "packages": [
            {"channel": "official", "download_url": "https://example.com/releases/android/app-v1.0.0.apk",
             "file_size": 15360000, "checksum": "md5:a1b2c3d4e5f6"},
        ],
        "status": VersionStatus.ARCHIVED,
    },
    {
        "version": {
            "platform": Platform.ANDROID,
            "version": "1.1.0",
            "title": "v1.1.0 Feature improvements",
            "description": "## Feature Improvements\n\n- Added image recognition\n- Fixed known bugs",
            "i18n_description": {"zh-CN": "## 功能优化\n\n- 新增图片识别功能\n- 修复已知 bug"},
            "release_date": datetime(2025, 8, 15, tzinfo=timezone.utc),
        },
        "packages": [
            {"channel": "official", "download_url": "https://example.com/releases/android/app-v1.1.0.apk",
             "file_size": 16384000, "checksum": "md5:b2c3d4e5f6a7"},
            {"channel": "google_play"},
        ],
        "status": VersionStatus.PUBLISHED,
    },
    {
        "version": {
            "platform": Platform.ANDROID,
            "version": "1.2.0",
            "update_type": UpdateType.FORCE,
            "title": "v1.2.0 Critical security update",
            "description": "## Critical Security Update\n\n- Fixed critical security vulnerability",
            "i18n_description": {"zh-CN": "## 重要安全更新\n\n- 修复关键安全漏洞"},
            "min_support_version": "1.1.0",
            "release_date": datetime(2025, 12, 1, tzinfo=timezone.utc),
        },
        "packages": [
            {"channel": "official", "download_url": "https://example.com/releases/android/app-v1.2.0.apk",
             "file_size": 17408000, "checksum": "md5:c3d4e5f6a7b8"},
            {"channel": "google_play"},
        ],
        "status": VersionStatus.PUBLISHED,
    },
    {
        "version": {
            "platform": Platform.ANDROID,
            "version": "1.3.0",
            "title": "v1.3.0 Beta of the new editor",
            "description": "## New Editor\n\n- Staged rollout",
            "gray_release": True,
            "gray_percent": 20,
        },
        "packages": [
            {"channel": "official", "download_url": "https://example.com/releases/android/app-v1.3.0.apk",
             "file_size": 18432000, "checksum": "md5:d4e5f6a7b8c9"},
        ],
        "status": VersionStatus.PUBLISHED,
    },
    {
        "version": {
            "platform": Platform.IOS,
            "version": "1.2.0",
            "title": "v1.2.0 Critical security update",
            "description": "## Critical Security Update",
            "min_support_version": "1.1.0",
            "release_date": datetime(2025, 12, 1, tzinfo=timezone.utc),
        },
        "packages": [{"channel": "app_store"}],
        "status": VersionStatus.PUBLISHED,
    },
    {
        "version": {
            "platform": None,
            "version": "1.4.0",
            "title": "v1.4.0 Draft",
            "description": "Not visible to clients yet",
        },
        "packages": [],
        "status": VersionStatus.DRAFT,
    },
]


def seed(db: Session) -> int:
    """Create every seed version that does not exist yet; returns how many were created"""
    created = 0
    for entry in SEED_VERSIONS:
        try:
            version = AppVersionService.create_version(db, AppVersionCreate(**entry["version"]), user="seed")
        except ConflictError:
            continue

        for package in entry["packages"]:
            PackageService.create_package(db, version.id, PackageCreate(**package), user="seed")

        if entry["status"] in (VersionStatus.PUBLISHED, VersionStatus.ARCHIVED):
            AppVersionService.publish_version(db, version.id, user="seed")
        if entry["status"] == VersionStatus.ARCHIVED:
            AppVersionService.archive_version(db, version.id, user="seed")
        created += 1
    return created


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        print(f"Seeded {seed(session)} versions")
