"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from config.settings import settings
from src.bl_betting.api.router import router as bet_router
from src.bl_common.errors import AppError
from src.bl_common.response import error_response
from src.bl_gateway.api.router import router as auth_router
from src.bl_gateway.middleware.request_log import RequestLogMiddleware
from src.bl_market.api.router import router as market_router
from src.bl_settlement.api.router import router as admin_router
from src.container import Container, build_container

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(container: Container | None = None) -> FastAPI:
    container = container or build_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: verify DB + Redis connections. Shutdown: dispose."""
        if container.engine is not None:
            async with container.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        if container.redis is not None:
            await container.redis.ping()
        yield
        await container.aclose()

    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(RequestLogMiddleware)

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error(
                "%s %s failed: [%d] %s",
                request.method, request.url.path, exc.code, exc.message,
            )
        resp = error_response(exc.code, exc.message)
        return JSONResponse(
            status_code=exc.http_status,
            content=resp.model_dump(),
        )

    app.include_router(auth_router, prefix="/api/v1")
    app.include_router(market_router, prefix="/api/v1")
    app.include_router(bet_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": VERSION}

    return app


app = create_app()
