# src/boardroom/main.py
from __future__ import annotations

import logging
import logging.config
import os
from contextlib import asynccontextmanager

from asyncpg.exceptions import (
    CheckViolationError,
    ForeignKeyViolationError,
    NotNullViolationError,
    UniqueViolationError,
)
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from boardroom.api.routers import build_item_router, health_router, profiles_router, voting_router
from boardroom.core.config import settings
from boardroom.db.session import dispose_engine
from boardroom.exceptions import BoardroomError
from boardroom.schemas import MinutesCreate, MinutesOut, ResolutionCreate, ResolutionOut
from boardroom.voting.kinds import MINUTES, RESOLUTION
from boardroom.voting.notifier import build_notifier

LOG_LEVEL = os.getenv("BOARDROOM_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            # include fields you want searchable
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s %(process)d %(module)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        "":               {"handlers": ["console"], "level": LOG_LEVEL},
        "boardroom":      {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "uvicorn":        {"handlers": ["console"], "level": "INFO", "propagate": False},
        "uvicorn.error":  {"handlers": ["console"], "level": "INFO", "propagate": False},
        "uvicorn.access": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}

log = logging.getLogger("boardroom.main")


def _integrity_status(exc: IntegrityError) -> tuple[int, str]:
    """
    Map DB integrity errors to clear 4xx responses instead of 500.
    - Unique constraint -> 409 Conflict
    - Not-null / FK / Check -> 422 Unprocessable Entity
    - Otherwise -> 400 Bad Request
    """
    orig = getattr(exc, "orig", None)
    # asyncpg errors arrive wrapped by the SQLAlchemy adapter
    cause = getattr(orig, "__cause__", None) or orig

    if isinstance(cause, UniqueViolationError):
        return 409, "Unique constraint violation"
    if isinstance(cause, ForeignKeyViolationError):
        return 422, "Foreign key constraint failed"
    if isinstance(cause, NotNullViolationError):
        return 422, "Missing required field (NOT NULL violation)"
    if isinstance(cause, CheckViolationError):
        return 422, "Check constraint failed"

    # generic string heuristics (sqlite and other drivers)
    low = str(orig or exc).lower()
    if "unique constraint" in low or "duplicate key" in low:
        return 409, "Unique constraint violation"
    if "foreign key" in low:
        return 422, "Foreign key constraint failed"
    if "not null" in low or "null value in column" in low:
        return 422, "Missing required field (NOT NULL violation)"
    if "check constraint" in low:
        return 422, "Check constraint failed"
    return 400, "Integrity error"


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---------------- STARTUP ----------------
        logging.config.dictConfig(LOGGING)
        app.state.completion_notifier = build_notifier(settings)
        log.info("[startup] %s %s", settings.APP_NAME, settings.APP_VERSION)
        yield
        # ---------------- SHUTDOWN ---------------
        await dispose_engine()
        log.info("[shutdown] engine disposed")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(BoardroomError)
    async def boardroom_error_handler(request: Request, exc: BoardroomError):
        if exc.status_code >= 500:
            log.error("%s %s -> %s", request.method, request.url.path, exc.message)
        else:
            log.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.error_code)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        status_code, detail = _integrity_status(exc)
        message = str(getattr(exc, "orig", None) or exc)

        # Log once with context; don't leak sensitive values
        log.exception(
            "IntegrityError on %s %s -> %s: %s",
            request.method, request.url.path, status_code, message,
        )
        return JSONResponse(
            status_code=status_code,
            content={
                "detail": {
                    "error": "integrity_error",
                    "reason": detail,
                    "db_message": message,
                }
            },
        )

    app.include_router(health_router)
    app.include_router(profiles_router)
    app.include_router(
        build_item_router(
            kind=RESOLUTION,
            create_schema=ResolutionCreate,
            read_schema=ResolutionOut,
            path_prefix="/resolutions",
            tags=["resolutions"],
        )
    )
    app.include_router(
        build_item_router(
            kind=MINUTES,
            create_schema=MinutesCreate,
            read_schema=MinutesOut,
            path_prefix="/minutes",
            tags=["minutes"],
        )
    )
    app.include_router(voting_router)
    return app


app = create_app()
