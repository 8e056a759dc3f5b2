import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from trustimonials.config import settings
from trustimonials.db.base import engine, init_db
from trustimonials.routers import (
    dashboard,
    embeds,
    links,
    public_links,
    share_links,
    space_testimonials,
    spaces,
    templates,
    testimonials,
    widgets,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _app_lifespan(_app: FastAPI) -> AsyncIterator[None]:
    if settings.is_sqlite:
        init_db()
    yield


def create_app() -> FastAPI:
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    app = FastAPI(
        title="Trustimonials API",
        default_response_class=ORJSONResponse,
        lifespan=_app_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(_request: Request, exc: SQLAlchemyError) -> ORJSONResponse:
        logger.exception("Database error", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Database query failed."})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Internal server error."})

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/health/db")
    def health_db() -> dict[str, str]:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return {"db": "ok"}
        except Exception as exc:  # pragma: no cover - simple runtime check
            return {"db": f"error: {exc}"}

    app.include_router(spaces.router)
    app.include_router(space_testimonials.router)
    app.include_router(widgets.router)
    app.include_router(embeds.router)
    app.include_router(share_links.router)
    app.include_router(links.router)
    app.include_router(public_links.router)
    app.include_router(templates.router)
    app.include_router(testimonials.router)
    app.include_router(dashboard.router)

    return app


app = create_app()
