import itertools
from typing import Dict, Iterable, List, Optional

from update_center.core import version_codec
from update_center.core.rollout import bucket
from update_center.models.app_version import (
    AppVersion,
    AppVersionPackage,
    UpdateType,
    VersionStatus,
)
from update_center.services.catalog import VersionCatalog

_ids = itertools.count(1)


def make_version(version: str, platform=None, **overrides) -> AppVersion:
    fields = dict(
        id=f"v-{next(_ids)}",
        platform=platform,
        version=version,
        version_code=version_codec.encode(version),
        update_type=UpdateType.OPTIONAL,
        title=f"v{version}",
        description=f"Release {version}",
        i18n_description=None,
        min_support_version=None,
        min_support_version_code=None,
        status=VersionStatus.PUBLISHED,
        gray_release=False,
        gray_percent=0,
        release_date=None,
    )
    fields.update(overrides)
    if fields["min_support_version"] and fields["min_support_version_code"] is None:
        fields["min_support_version_code"] = version_codec.encode(fields["min_support_version"])
    return AppVersion(**fields)


def make_package(version: AppVersion, channel: str = "official", **overrides) -> AppVersionPackage:
    fields = dict(
        id=f"p-{next(_ids)}",
        version_id=version.id,
        channel=channel,
        download_url=f"https://example.com/{version.version}/{channel}.apk",
        file_size=1024,
        checksum=None,
        enabled=True,
    )
    fields.update(overrides)
    return AppVersionPackage(**fields)


def device_in_bucket(target: int) -> str:
    """First ``device-N`` identifier hashing into ``target``"""
    return next(
        device_id
        for device_id in (f"device-{i}" for i in range(100000))
        if bucket(device_id) == target
    )


class InMemoryVersionCatalog(VersionCatalog):
    def __init__(self, versions: Iterable[AppVersion] = (), packages: Iterable[AppVersionPackage] = ()):
        self.versions: List[AppVersion] = list(versions)
        self.packages: Dict[str, List[AppVersionPackage]] = {}
        for pkg in packages:
            self.add_package(pkg)
        self.calls: List[tuple] = []

    def add(self, version: AppVersion, *packages: AppVersionPackage) -> AppVersion:
        self.versions.append(version)
        for pkg in packages:
            self.add_package(pkg)
        return version

    def add_package(self, pkg: AppVersionPackage) -> None:
        self.packages.setdefault(pkg.version_id, []).append(pkg)

    def _published(self, platform) -> List[AppVersion]:
        return [
            v for v in self.versions
            if v.status == VersionStatus.PUBLISHED and (platform is None or v.platform in (platform, None))
        ]

    def latest_published(self, platform=None, min_version_code_exclusive=None, require_full_release=False):
        self.calls.append(("latest_published", platform, min_version_code_exclusive, require_full_release))
        candidates = self._published(platform)
        if min_version_code_exclusive is not None:
            candidates = [v for v in candidates if v.version_code > min_version_code_exclusive]
        if require_full_release:
            candidates = [v for v in candidates if not v.gray_release or v.gray_percent >= 100]
        if not candidates:
            return None
        return max(candidates, key=lambda v: v.version_code)

    def packages_of(self, version_id) -> List[AppVersionPackage]:
        return [pkg for pkg in self.packages.get(version_id, []) if pkg.enabled]

    def published_page(self, platform: Optional[object], offset: int, limit: int):
        ordered = sorted(self._published(platform), key=lambda v: v.version_code, reverse=True)
        return ordered[offset:offset + limit], len(ordered)
