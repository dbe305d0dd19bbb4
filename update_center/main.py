from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from update_center.config import settings
from update_center.database.session import engine, Base
from update_center.utils.logger import setup_logging

# Register models with SQLAlchemy
from update_center.models.app_version import AppVersion, AppVersionPackage  # noqa: F401

from update_center.api.update_api import router as update_router
from update_center.api.app_version_api import router as app_version_router

from update_center.events import setup_events

APP_VERSION = "1.0.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=APP_VERSION,
        debug=settings.DEBUG,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(update_router, prefix=settings.API_V1_PREFIX)
    app.include_router(app_version_router, prefix=settings.API_V1_PREFIX)

    setup_events(app)

    @app.on_event("startup")
    async def startup_event():
        Base.metadata.create_all(bind=engine)
        logging.info(f"{settings.APP_NAME} started in {settings.ENVIRONMENT} mode")

    @app.on_event("shutdown")
    async def shutdown_event():
        logging.info(f"{settings.APP_NAME} shutting down")

    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": APP_VERSION,
            "status": "operational"
        }

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


def run():
    import uvicorn

    setup_logging()
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
