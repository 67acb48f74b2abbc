"""Main FastAPI application"""
import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware
from apscheduler.schedulers.background import BackgroundScheduler

from src.sheet_import.api.endpoints import health, preview, records
from src.sheet_import.config import Settings, settings as default_settings
from src.sheet_import.database import SessionLocal, init_db
from src.sheet_import.services.import_reconciler import ImportReconciler
from src.sheet_import.services.session_store import ValidationSessionStore

logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(f"Starting Sheet Import API in {settings.APP_ENV} environment")
    settings.validate_secrets_for_production()

    if app.state.session_factory is SessionLocal:
        init_db()

    scheduler: Optional[BackgroundScheduler] = None
    if settings.SCHEDULER_ENABLED:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            app.state.preview_store.purge_expired,
            'interval',
            minutes=settings.PREVIEW_PURGE_INTERVAL_MINUTES,
            id='preview_purge',
            replace_existing=True
        )
        scheduler.start()
        logger.info(f"Scheduler started - purging previews every {settings.PREVIEW_PURGE_INTERVAL_MINUTES} minutes")

    yield

    if scheduler:
        scheduler.shutdown()
        logger.info("Scheduler stopped")
    logger.info("Shutting down Sheet Import API")


def create_app(
    settings: Settings = default_settings,
    session_factory: Callable[[], Session] = SessionLocal
) -> FastAPI:
    app = FastAPI(
        title="Sheet Import",
        description="Validate spreadsheet uploads, review the rows and import the valid ones",
        version="0.1.0",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.preview_store = ValidationSessionStore(
        ttl_seconds=settings.PREVIEW_SESSION_TTL_MINUTES * 60
    )
    app.state.reconciler = ImportReconciler(
        app.state.preview_store,
        session_factory,
        timeout_seconds=settings.IMPORT_TIMEOUT_SECONDS
    )

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(preview.router, tags=["Preview"])
    app.include_router(records.router, tags=["Records"])

    @app.get("/")
    def root():
        return {
            "message": "Sheet Import API",
            "environment": settings.APP_ENV,
            "docs": "/docs"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Sheet Import API in development mode.")
    uvicorn.run("src.sheet_import.main:app", host="0.0.0.0", port=8000, reload=True)
