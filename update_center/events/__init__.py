from fastapi import FastAPI

from update_center.events.catalog_events import setup_catalog_events


def setup_events(app: FastAPI):
    """Register application event handlers"""
    setup_catalog_events(app)
