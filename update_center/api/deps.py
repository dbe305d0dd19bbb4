from typing import Optional

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from update_center.config import settings
from update_center.core.errors import UpdateCenterError
from update_center.database.session import get_db
from update_center.services.catalog import (
    CachedVersionCatalog,
    CatalogCache,
    SqlAlchemyVersionCatalog,
    VersionCatalog,
)
from update_center.services.update_service import UpdateResolver

_catalog_cache: Optional[CatalogCache] = None


def get_catalog_cache() -> Optional[CatalogCache]:
    global _catalog_cache
    if settings.CATALOG_CACHE_TTL_SECONDS <= 0:
        return None
    if _catalog_cache is None:
        _catalog_cache = CatalogCache(settings.CATALOG_CACHE_TTL_SECONDS)
    return _catalog_cache


def get_catalog(db: Session = Depends(get_db)) -> VersionCatalog:
    catalog: VersionCatalog = SqlAlchemyVersionCatalog(db)
    cache = get_catalog_cache()
    if cache is not None:
        catalog = CachedVersionCatalog(catalog, cache)
    return catalog


def get_update_resolver(catalog: VersionCatalog = Depends(get_catalog)) -> UpdateResolver:
    return UpdateResolver(catalog)


def http_error(exc: UpdateCenterError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)
