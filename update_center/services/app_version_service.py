from sqlalchemy.orm import Session, selectinload
from sqlalchemy import or_, func
from typing import List, Optional, Dict, Any, Tuple
from datetime import datetime, timezone
import logging

from update_center.core import version_codec
from update_center.core.errors import ConflictError, InvalidStateError, NotFoundError
from update_center.events.catalog_events import catalog_changed
from update_center.models.app_version import (
    AppVersion, Platform, UpdateType, VersionStatus, PUBLISHED_MUTABLE_FIELDS,
)
from update_center.schemas.app_version import AppVersionCreate, AppVersionUpdate
from update_center.utils.logger import JsonLogger

logger = logging.getLogger(__name__)

# schema field name -> model attribute
_FIELD_MAP = {"metadata": "extra_metadata"}


def _describe(version: AppVersion) -> Dict[str, Any]:
    return {
        "id": version.id,
        "platform": version.platform.value if version.platform else None,
        "version": version.version,
        "status": version.status.value if version.status else None,
    }


class AppVersionService:
    @staticmethod
    def get_version(db: Session, version_id: str) -> AppVersion:
        version = db.query(AppVersion).options(selectinload(AppVersion.packages)).filter(
            AppVersion.id == version_id
        ).first()
        if not version:
            raise NotFoundError(f"Version #{version_id} not found")
        return version

    @staticmethod
    def list_versions(
        db: Session,
        page: int = 1,
        page_size: int = 10,
        keyword: Optional[str] = None,
        platform: Optional[Platform] = None,
        status: Optional[VersionStatus] = None,
        update_type: Optional[UpdateType] = None,
    ) -> Tuple[List[AppVersion], int]:
        query = db.query(AppVersion)

        if keyword:
            pattern = f"%{keyword}%"
            query = query.filter(or_(AppVersion.version.like(pattern), AppVersion.title.like(pattern)))
        if platform:
            query = query.filter(AppVersion.platform == platform)
        if status:
            query = query.filter(AppVersion.status == status)
        if update_type:
            query = query.filter(AppVersion.update_type == update_type)

        total = query.count()
        versions = query.options(selectinload(AppVersion.packages)).order_by(
            AppVersion.version_code.desc()
        ).offset((page - 1) * page_size).limit(page_size).all()
        return versions, total

    @staticmethod
    def _assert_unique(db: Session, platform: Optional[Platform], version: str, exclude_id: Optional[str] = None):
        query = db.query(AppVersion).filter(AppVersion.version == version)
        if platform is None:
            query = query.filter(AppVersion.platform.is_(None))
        else:
            query = query.filter(AppVersion.platform == platform)
        if exclude_id:
            query = query.filter(AppVersion.id != exclude_id)
        if query.first():
            label = platform.value if platform else "universal"
            raise ConflictError(f"Version already exists: {label} v{version}")

    @staticmethod
    def create_version(db: Session, data: AppVersionCreate, user: str = "system") -> AppVersion:
        """Create a draft version"""
        AppVersionService._assert_unique(db, data.platform, data.version)

        db_version = AppVersion(
            platform=data.platform,
            version=data.version,
            version_code=version_codec.encode(data.version),
            update_type=data.update_type,
            title=data.title,
            description=data.description,
            i18n_description=data.i18n_description,
            min_support_version=data.min_support_version,
            min_support_version_code=(
                version_codec.encode(data.min_support_version) if data.min_support_version else None
            ),
            status=VersionStatus.DRAFT,
            gray_release=data.gray_release,
            gray_percent=data.gray_percent,
            release_date=data.release_date,
            extra_metadata=data.metadata,
        )

        db.add(db_version)
        db.commit()
        db.refresh(db_version)

        JsonLogger.log_audit("create_version", user, "app_version", _describe(db_version))
        logger.info(f"Version created: {db_version.version} (code {db_version.version_code})")
        return db_version

    @staticmethod
    def update_version(db: Session, version_id: str, data: AppVersionUpdate, user: str = "system") -> AppVersion:
        version = AppVersionService.get_version(db, version_id)
        changes = data.model_dump(exclude_unset=True)
        changes = {_FIELD_MAP.get(k, k): v for k, v in changes.items()}

        if version.status == VersionStatus.ARCHIVED:
            raise InvalidStateError("Archived versions cannot be modified")

        if version.status == VersionStatus.PUBLISHED:
            frozen = sorted(k for k in changes if k not in PUBLISHED_MUTABLE_FIELDS)
            if frozen:
                raise InvalidStateError(
                    f"Published versions cannot change: {', '.join(frozen)}"
                )

        if "version" in changes or "platform" in changes:
            new_version = changes.get("version", version.version)
            new_platform = changes.get("platform", version.platform)
            AppVersionService._assert_unique(db, new_platform, new_version, exclude_id=version.id)
            changes["version_code"] = version_codec.encode(new_version)

        if "min_support_version" in changes:
            floor = changes["min_support_version"]
            changes["min_support_version_code"] = version_codec.encode(floor) if floor else None

        for key, value in changes.items():
            setattr(version, key, value)

        db.commit()
        db.refresh(version)

        JsonLogger.log_audit("update_version", user, "app_version", {**_describe(version), "fields": sorted(changes)})
        if version.status == VersionStatus.PUBLISHED:
            catalog_changed("update", _describe(version))
        return version

    @staticmethod
    def delete_version(db: Session, version_id: str, user: str = "system") -> None:
        version = AppVersionService.get_version(db, version_id)
        if version.status != VersionStatus.DRAFT:
            raise InvalidStateError("Only draft versions can be deleted; archive it instead")

        details = _describe(version)
        db.delete(version)
        db.commit()

        JsonLogger.log_audit("delete_version", user, "app_version", details)

    @staticmethod
    def publish_version(
        db: Session, version_id: str, release_date: Optional[datetime] = None, user: str = "system"
    ) -> AppVersion:
        """Draft -> Published; makes the version visible to clients"""
        version = AppVersionService.get_version(db, version_id)

        if version.status == VersionStatus.PUBLISHED:
            raise InvalidStateError("Version is already published")
        if version.status == VersionStatus.ARCHIVED:
            raise InvalidStateError("Archived versions cannot be published")

        version.status = VersionStatus.PUBLISHED
        if release_date is not None:
            version.release_date = release_date
        elif version.release_date is None:
            version.release_date = datetime.now(timezone.utc)

        db.commit()
        db.refresh(version)

        JsonLogger.log_audit("publish_version", user, "app_version", _describe(version))
        catalog_changed("publish", _describe(version))
        logger.info(f"Version published: {version.version}")
        return version

    @staticmethod
    def archive_version(db: Session, version_id: str, user: str = "system") -> AppVersion:
        """Published -> Archived; terminal"""
        version = AppVersionService.get_version(db, version_id)

        if version.status == VersionStatus.ARCHIVED:
            raise InvalidStateError("Version is already archived")
        if version.status != VersionStatus.PUBLISHED:
            raise InvalidStateError("Only published versions can be archived")

        version.status = VersionStatus.ARCHIVED
        db.commit()
        db.refresh(version)

        JsonLogger.log_audit("archive_version", user, "app_version", _describe(version))
        catalog_changed("archive", _describe(version))
        logger.info(f"Version archived: {version.version}")
        return version

    @staticmethod
    def get_stats(db: Session) -> Dict[str, Any]:
        status_counts = {status.value: 0 for status in VersionStatus}
        for status, count in db.query(AppVersion.status, func.count(AppVersion.id)).group_by(AppVersion.status):
            status_counts[status.value] = count

        platform_stats = [
            {"platform": platform.value if platform else None, "count": count}
            for platform, count in db.query(AppVersion.platform, func.count(AppVersion.id)).group_by(
                AppVersion.platform
            )
        ]

        return {
            "total": sum(status_counts.values()),
            **status_counts,
            "platform_stats": platform_stats,
        }
