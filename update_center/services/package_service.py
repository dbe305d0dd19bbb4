from sqlalchemy.orm import Session
from typing import List, Dict
import logging

from update_center.config import settings
from update_center.core.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from update_center.events.catalog_events import catalog_changed
from update_center.models.app_version import (
    AppVersion, AppVersionPackage, Channel, VersionStatus, STORE_CHANNELS,
)
from update_center.schemas.app_version import PackageCreate, PackageUpdate
from update_center.utils.logger import JsonLogger

logger = logging.getLogger(__name__)


class PackageService:
    @staticmethod
    def default_store_url(channel: str) -> str:
        if channel == Channel.APP_STORE.value:
            return settings.APP_STORE_URL
        if channel == Channel.GOOGLE_PLAY.value:
            return settings.GOOGLE_PLAY_URL
        return ""

    @staticmethod
    def store_defaults() -> Dict[str, str]:
        return {
            "app_store_url": settings.APP_STORE_URL,
            "google_play_url": settings.GOOGLE_PLAY_URL,
        }

    @staticmethod
    def _get_version(db: Session, version_id: str) -> AppVersion:
        version = db.query(AppVersion).filter(AppVersion.id == version_id).first()
        if not version:
            raise NotFoundError(f"Version #{version_id} not found")
        return version

    @staticmethod
    def _get_package(db: Session, version_id: str, package_id: str) -> AppVersionPackage:
        pkg = db.query(AppVersionPackage).filter(
            AppVersionPackage.id == package_id,
            AppVersionPackage.version_id == version_id
        ).first()
        if not pkg:
            raise NotFoundError(f"Package #{package_id} not found")
        return pkg

    @staticmethod
    def _get_mutable_package(db: Session, version_id: str, package_id: str) -> AppVersionPackage:
        pkg = PackageService._get_package(db, version_id, package_id)
        if pkg.version.status == VersionStatus.ARCHIVED:
            raise InvalidStateError("Packages of archived versions are read-only")
        return pkg

    @staticmethod
    def _changed(version: AppVersion, action: str, pkg: AppVersionPackage, user: str, details=None):
        details = details or {"version_id": version.id, "package_id": pkg.id, "channel": pkg.channel}
        JsonLogger.log_audit(action, user, "app_version_package", details)
        if version.status == VersionStatus.PUBLISHED:
            catalog_changed(action, details)

    @staticmethod
    def list_packages(db: Session, version_id: str) -> List[AppVersionPackage]:
        PackageService._get_version(db, version_id)
        return db.query(AppVersionPackage).filter(
            AppVersionPackage.version_id == version_id
        ).order_by(AppVersionPackage.channel).all()

    @staticmethod
    def create_package(db: Session, version_id: str, data: PackageCreate, user: str = "system") -> AppVersionPackage:
        version = PackageService._get_version(db, version_id)
        if version.status == VersionStatus.ARCHIVED:
            raise InvalidStateError("Archived versions cannot receive packages")

        existing = db.query(AppVersionPackage).filter(
            AppVersionPackage.version_id == version_id,
            AppVersionPackage.channel == data.channel
        ).first()
        if existing:
            raise ConflictError(f"Package already exists for channel {data.channel}")

        download_url = data.download_url
        if not download_url and data.channel in STORE_CHANNELS:
            download_url = PackageService.default_store_url(data.channel)
        if not download_url:
            raise ValidationError("download_url is required")

        pkg = AppVersionPackage(
            version_id=version_id,
            channel=data.channel,
            download_url=download_url,
            file_size=data.file_size,
            checksum=data.checksum,
            enabled=data.enabled,
        )
        db.add(pkg)
        db.commit()
        db.refresh(pkg)

        PackageService._changed(version, "create_package", pkg, user)
        return pkg

    @staticmethod
    def update_package(
        db: Session, version_id: str, package_id: str, data: PackageUpdate, user: str = "system"
    ) -> AppVersionPackage:
        pkg = PackageService._get_mutable_package(db, version_id, package_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if key == "download_url" and not value:
                raise ValidationError("download_url cannot be empty")
            setattr(pkg, key, value)
        db.commit()
        db.refresh(pkg)

        PackageService._changed(pkg.version, "update_package", pkg, user)
        return pkg

    @staticmethod
    def toggle_package(db: Session, version_id: str, package_id: str, user: str = "system") -> AppVersionPackage:
        pkg = PackageService._get_mutable_package(db, version_id, package_id)
        pkg.enabled = not pkg.enabled
        db.commit()
        db.refresh(pkg)

        PackageService._changed(pkg.version, "toggle_package", pkg, user)
        return pkg

    @staticmethod
    def delete_package(db: Session, version_id: str, package_id: str, user: str = "system") -> None:
        pkg = PackageService._get_mutable_package(db, version_id, package_id)
        version = pkg.version
        # snapshot before the row is gone
        details = pkg.to_dict()
        db.delete(pkg)
        db.commit()

        PackageService._changed(version, "delete_package", pkg, user, details)
