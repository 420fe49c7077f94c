import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from negosyo.core.async_tasks import drain_background_tasks
from negosyo.core.exceptions import NegosyoError
from negosyo.database import init_db
from negosyo.models import *  # noqa: F403

APP_VERSION = "0.1.0"
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    from negosyo.config import settings

    await init_db()
    logger.info("Negosyo Digital started (%s)", settings.environment)

    yield

    # Give pending notification emails a moment before the loop closes.
    await drain_background_tasks(timeout_seconds=5.0)

    from negosyo.database import dispose_engine

    await dispose_engine()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        # Previews are full pages with inline styles and Google Fonts.
        if not request.url.path.endswith("/preview"):
            response.headers["X-Frame-Options"] = "DENY"
        response.headers["Permissions-Policy"] = (
            "camera=(), microphone=(), geolocation=(), payment=(), usb=()"
        )
        return response


async def negosyo_error_handler(request: Request, exc: NegosyoError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.detail, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Negosyo Digital",
        description="Onboard small businesses, generate their websites and pay the creators who found them",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    from negosyo.config import settings

    allowed_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(NegosyoError, negosyo_error_handler)

    from negosyo.api import API_PREFIX, API_ROUTERS

    for router in API_ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.storage_path, check_dir=False),
        name="uploads",
    )

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "name": "Negosyo Digital",
            "version": APP_VERSION,
            "docs": "/docs",
            "health": f"{API_PREFIX}/health",
        }

    return app


app = create_app()
