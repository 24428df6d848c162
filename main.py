"""
main.py
-------
FastAPI application factory and entry point.

Application lifecycle:
  1. App is created by create_application().
  2. lifespan context manager runs on startup / shutdown.
  3. Routers are registered (each carries its own /api/... prefix).
  4. Exception handlers turn domain errors into {"error": ...} bodies.

Run with:
    uvicorn main:app --reload              # development
    uvicorn main:app --workers 4           # production (no --reload)
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from box_organizer.api.routes import auth, boxes, export, locations, profiles, qr_codes, workspaces
from box_organizer.core.config import settings
from box_organizer.core.errors import AppError, ValidationFailed
from box_organizer.core.logging import configure_logging, get_logger, sanitize_metadata
from box_organizer.db.session import engine
from box_organizer.schemas.common import first_error_per_field

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Startup / shutdown lifecycle hook.

    Startup:
      - Configure structured logging

    Shutdown:
      - Dispose the async engine (graceful connection pool drain)
    """
    configure_logging()
    logger.info(
        "Starting up",
        app=settings.APP_NAME,
        env=settings.APP_ENV,
        debug=settings.DEBUG,
    )
    yield
    logger.info("Shutting down, disposing DB engine")
    await engine.dispose()


def _request_context(request: Request) -> dict:
    return sanitize_metadata(
        {
            "path": request.url.path,
            "method": request.method,
            "query": dict(request.query_params),
        }
    )


def create_application() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Home inventory backend: workspaces, hierarchical locations, "
            "boxes, printable QR codes and inventory export."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Routers ───────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(profiles.router)
    app.include_router(workspaces.router)
    app.include_router(locations.router)
    app.include_router(boxes.router)
    app.include_router(qr_codes.router)
    app.include_router(export.router)

    # ── Exception Handlers ────────────────────────────────────────────────────

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        body: dict = {"error": exc.message}
        if isinstance(exc, ValidationFailed) and exc.details:
            body["details"] = exc.details
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                error=exc.message,
                error_type=type(exc).__name__,
                stage=getattr(exc, "stage", None),
                **_request_context(request),
            )
        else:
            logger.info(
                "Request rejected",
                status_code=exc.status_code,
                error_type=type(exc).__name__,
                **_request_context(request),
            )
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = first_error_per_field(exc.errors())
        message = next(iter(details.values()), "Invalid input")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message, "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            exc_info=True,
            **_request_context(request),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    # ── Health Check ──────────────────────────────────────────────────────────

    @app.get("/health", tags=["Health"], summary="Service health check")
    async def health() -> dict:
        return {"status": "ok", "app": settings.APP_NAME, "env": settings.APP_ENV}

    return app


app = create_application()
