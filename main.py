import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from petflix.application.use_cases.notifications import (
    build_notification_processor,
    build_retention_job,
)
from petflix.config import get_settings
from petflix.infrastructure.database import SessionLocal, engine, initialize_database
from petflix.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Prepare the database and run the notification jobs for the app's lifetime."""

    settings = get_settings()
    initialize_database()

    jobs = []
    if settings.notification_processor_enabled:
        jobs = [
            build_notification_processor(settings, SessionLocal),
            build_retention_job(settings, SessionLocal),
        ]
        for job in jobs:
            job.start()
    else:
        logger.info("Notification processor disabled by configuration")
    app.state.notification_jobs = jobs

    try:
        yield
    finally:
        for job in reversed(jobs):
            job.stop(timeout=settings.notification_dispatch_timeout_seconds)
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(title="Petflix notifications", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
