import logging
from typing import Any, Callable, Dict, List

from fastapi import FastAPI

from update_center.utils.logger import JsonLogger

logger = logging.getLogger(__name__)

CatalogListener = Callable[[str, Dict[str, Any]], None]

_listeners: List[CatalogListener] = []


def subscribe(listener: CatalogListener) -> None:
    if listener not in _listeners:
        _listeners.append(listener)


def unsubscribe(listener: CatalogListener) -> None:
    if listener in _listeners:
        _listeners.remove(listener)


def catalog_changed(action: str, details: Dict[str, Any]) -> None:
    """Notify listeners synchronously that client-visible catalog state changed.

    Runs before the administrative call returns, so caches in front of the
    catalog never serve a version that was archived or miss one just published.
    """
    JsonLogger.log_event("catalog_changed", {"action": action, **details})
    for listener in list(_listeners):
        listener(action, details)


def setup_catalog_events(app: FastAPI):
    @app.on_event("startup")
    async def log_catalog_listeners():
        logger.info(f"Catalog change listeners registered: {len(_listeners)}")
