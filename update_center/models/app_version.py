from sqlalchemy import (
    Column, String, Integer, BigInteger, DateTime, Boolean, ForeignKey, Text, Enum, JSON,
    Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from update_center.database.base import BaseModel


class Platform(str, enum.Enum):
    ANDROID = "android"
    IOS = "ios"


class UpdateType(str, enum.Enum):
    OPTIONAL = "optional"
    FORCE = "force"


class VersionStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Channel(str, enum.Enum):
    OFFICIAL = "official"
    BETA = "beta"
    APP_STORE = "app_store"
    GOOGLE_PLAY = "google_play"


# Store channels carry a store listing URL instead of an uploaded binary
STORE_CHANNELS = (Channel.APP_STORE.value, Channel.GOOGLE_PLAY.value)

# Fields a published version may still change
PUBLISHED_MUTABLE_FIELDS = frozenset({
    "update_type",
    "description",
    "gray_release",
    "gray_percent",
    "i18n_description",
    "extra_metadata",
})


class AppVersion(BaseModel):
    __tablename__ = "app_versions"
    __table_args__ = (
        UniqueConstraint("platform", "version", name="uq_app_versions_platform_version"),
        Index("ix_app_versions_platform_status", "platform", "status"),
    )

    # NULL platform = universal, matches every requested platform
    platform = Column(Enum(Platform), nullable=True)
    version = Column(String(50), nullable=False)
    version_code = Column(Integer, nullable=False, index=True)
    update_type = Column(Enum(UpdateType), default=UpdateType.OPTIONAL, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    i18n_description = Column(JSON)  # {"zh-CN": "...", "en-US": "..."}
    min_support_version = Column(String(50))
    min_support_version_code = Column(Integer)
    status = Column(Enum(VersionStatus), default=VersionStatus.DRAFT, nullable=False)
    gray_release = Column(Boolean, default=False, nullable=False)
    gray_percent = Column(Integer, default=0, nullable=False)  # 0-100
    release_date = Column(DateTime(timezone=True))
    extra_metadata = Column("metadata", JSON)

    # Relationships
    packages = relationship(
        "AppVersionPackage",
        back_populates="version",
        cascade="all, delete-orphan",
        order_by="AppVersionPackage.created_at",
    )

    @property
    def is_partial_gray(self) -> bool:
        """True while a staged rollout has not reached every device"""
        return bool(self.gray_release) and (self.gray_percent or 0) < 100

    def __repr__(self):
        platform = self.platform.value if self.platform else "universal"
        return f"<AppVersion {platform} {self.version} ({self.status})>"


class AppVersionPackage(BaseModel):
    __tablename__ = "app_version_packages"
    __table_args__ = (
        UniqueConstraint("version_id", "channel", name="uq_app_version_packages_version_channel"),
    )

    version_id = Column(String(36), ForeignKey("app_versions.id", ondelete="CASCADE"), nullable=False)
    channel = Column(String(50), nullable=False)
    download_url = Column(String(1000), nullable=False)
    file_size = Column(BigInteger, default=0, nullable=False)  # bytes, 0 for store channels
    checksum = Column(String(255))  # "md5:<hex>"
    enabled = Column(Boolean, default=True, nullable=False)

    # Relationships
    version = relationship("AppVersion", back_populates="packages")
