"""Read side of the version catalog used by the update resolver."""
import abc
import logging
import threading
import time
from typing import Any, Dict, Hashable, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from update_center.events import catalog_events
from update_center.models.app_version import (
    AppVersion,
    AppVersionPackage,
    Platform,
    VersionStatus,
)

logger = logging.getLogger(__name__)


class VersionCatalog(abc.ABC):
    """Read contract over published versions and their packages."""

    @abc.abstractmethod
    def latest_published(
        self,
        platform: Optional[Platform] = None,
        min_version_code_exclusive: Optional[int] = None,
        require_full_release: bool = False,
    ) -> Optional[AppVersion]:
        """Published version with the greatest version code.

        Only versions for ``platform`` or universal ones (no platform) qualify;
        ``platform=None`` accepts every version. ``min_version_code_exclusive``
        keeps versions strictly above it; ``require_full_release`` drops gray
        releases below 100 percent. Ties on version code are unspecified.
        """

    @abc.abstractmethod
    def packages_of(self, version_id: str) -> List[AppVersionPackage]:
        """Enabled packages of a version."""

    @abc.abstractmethod
    def published_page(
        self, platform: Optional[Platform], offset: int, limit: int
    ) -> Tuple[List[AppVersion], int]:
        """Published versions by version code descending, plus the total count."""


class SqlAlchemyVersionCatalog(VersionCatalog):
    def __init__(self, db: Session):
        self.db = db

    def _published(self, platform: Optional[Platform]):
        query = self.db.query(AppVersion).filter(AppVersion.status == VersionStatus.PUBLISHED)
        if platform is None:
            # universal request: every platform qualifies
            return query
        return query.filter(or_(AppVersion.platform == platform, AppVersion.platform.is_(None)))

    def latest_published(self, platform=None, min_version_code_exclusive=None, require_full_release=False):
        query = self._published(platform)

        if min_version_code_exclusive is not None:
            query = query.filter(AppVersion.version_code > min_version_code_exclusive)

        if require_full_release:
            query = query.filter(
                or_(AppVersion.gray_release.is_(False), AppVersion.gray_percent >= 100)
            )

        return query.order_by(AppVersion.version_code.desc()).first()

    def packages_of(self, version_id):
        return self.db.query(AppVersionPackage).filter(
            AppVersionPackage.version_id == version_id,
            AppVersionPackage.enabled.is_(True)
        ).order_by(AppVersionPackage.created_at, AppVersionPackage.id).all()

    def published_page(self, platform, offset, limit):
        query = self._published(platform)
        total = query.count()
        versions = query.order_by(AppVersion.version_code.desc()).offset(offset).limit(limit).all()
        return versions, total


class CatalogCache:
    """Process-wide short-TTL store shared by every :class:`CachedVersionCatalog`.

    Subscribes to catalog change events and clears itself synchronously on
    publish, archive and package edits.
    """

    def __init__(self, ttl_seconds: float, clock=time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        catalog_events.subscribe(self.on_catalog_changed)

    def get(self, key: Hashable) -> Tuple[bool, Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False, None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return False, None
            return True, value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()

    def on_catalog_changed(self, action: str, details: Dict[str, Any]) -> None:
        logger.debug(f"Catalog cache invalidated by {action}")
        self.invalidate()

    def close(self) -> None:
        catalog_events.unsubscribe(self.on_catalog_changed)
        self.invalidate()


class CachedVersionCatalog(VersionCatalog):
    """Caches candidate lookups; history pages always hit the inner catalog.

    Cached rows outlive the session that loaded them, so callers must only read
    their column attributes. Packages come from ``packages_of``, never from
    ``version.packages``, which would lazy-load on a detached instance.
    """

    def __init__(self, inner: VersionCatalog, cache: CatalogCache):
        self.inner = inner
        self.cache = cache

    def latest_published(self, platform=None, min_version_code_exclusive=None, require_full_release=False):
        key = ("latest", platform, min_version_code_exclusive, require_full_release)
        hit, value = self.cache.get(key)
        if hit:
            return value
        value = self.inner.latest_published(platform, min_version_code_exclusive, require_full_release)
        self.cache.set(key, value)
        return value

    def packages_of(self, version_id):
        key = ("packages", version_id)
        hit, value = self.cache.get(key)
        if hit:
            return list(value)
        value = self.inner.packages_of(version_id)
        self.cache.set(key, tuple(value))
        return value

    def published_page(self, platform, offset, limit):
        return self.inner.published_page(platform, offset, limit)
