from update_center.models.app_version import (
    AppVersion,
    AppVersionPackage,
    Channel,
    Platform,
    UpdateType,
    VersionStatus,
    STORE_CHANNELS,
    PUBLISHED_MUTABLE_FIELDS,
)

__all__ = [
    "AppVersion",
    "AppVersionPackage",
    "Channel",
    "Platform",
    "UpdateType",
    "VersionStatus",
    "STORE_CHANNELS",
    "PUBLISHED_MUTABLE_FIELDS",
]
