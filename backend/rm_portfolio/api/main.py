"""Entrypoint for the RM portfolio FastAPI application."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from rm_portfolio.config import AppSettings, get_settings
from rm_portfolio.core.logging import setup_logging
from rm_portfolio.core.telemetry import setup_telemetry
from rm_portfolio.database import Database
from rm_portfolio.exceptions import NotFoundError, ValidationError
from rm_portfolio.schemas import HealthResponse

from .routes import get_api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI, db: Database, settings: AppSettings):
    setup_telemetry(app, settings, engine=db.engine)
    logger.info("RM portfolio service configuration: %s", settings.dict_for_logging())
    await db.create_all()
    yield
    await db.dispose()


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def _invalid(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(SQLAlchemyError)
    async def _database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Database failure while handling %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Failed to load portfolio data"},
        )


def create_app(db: Database | None = None, settings: AppSettings | None = None) -> FastAPI:
    setup_logging()
    app_settings = settings or get_settings()
    database_instance = db or Database(app_settings.database_url)

    app = FastAPI(
        title=app_settings.app_name,
        version="0.1.0",
        lifespan=lambda app: _lifespan(app, database_instance, app_settings),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)
    app.include_router(get_api_router(database_instance, app_settings))

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        """Return service readiness metadata."""

        return HealthResponse(
            status="ok",
            service=app_settings.telemetry_service_name,
            timestamp=datetime.now(app_settings.zone).isoformat(),
            timezone=app_settings.timezone,
        )

    return app


__all__ = ["create_app"]
