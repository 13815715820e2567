# medlink/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from medlink.core.config import settings
from medlink.core.logging_config import configure_logging
from medlink.core.middleware import AccessLogMiddleware
from medlink.db.sql import init_db
from medlink.routers import appointments, auth, doctor, doctors, health, hospitals, reviews, specializations

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Create tables on startup (no-op when they already exist).
    """
    await init_db()
    logger.info("MedLink API started (env=%s)", settings.APP_ENV)
    yield


def create_app(*, with_lifespan: bool = True) -> FastAPI:
    app = FastAPI(
        title="MedLink Appointments API",
        lifespan=lifespan if with_lifespan else None,
    )

    app.add_middleware(AccessLogMiddleware)

    # Routing
    app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
    app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["auth"])
    app.include_router(hospitals.router, prefix=settings.API_PREFIX, tags=["hospitals"])
    app.include_router(specializations.router, prefix=settings.API_PREFIX, tags=["specializations"])
    app.include_router(doctor.router, prefix=settings.API_PREFIX, tags=["doctor"])
    app.include_router(doctors.router, prefix=settings.API_PREFIX, tags=["doctors"])
    app.include_router(appointments.router, prefix=settings.API_PREFIX, tags=["appointments"])
    app.include_router(reviews.router, prefix=settings.API_PREFIX, tags=["reviews"])

    @app.get("/")
    def root():
        return {"message": "MedLink API running successfully"}

    return app


app = create_app()
