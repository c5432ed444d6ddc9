"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) makes it easy
to build fresh instances in tests.

For local development:
    uvicorn src.main:app --reload

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.dependencies import build_upload_service
from .api.routes import health, uploads
from .config.settings import get_settings
from .infrastructure.background.runner import BackgroundTaskRunner

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Starts the upload worker pool on startup and drains it on shutdown,
    so uploads already accepted get a chance to finish.
    """
    # Startup
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "Upload API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {"storage": settings.storage_mock_mode},
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    runner = BackgroundTaskRunner(max_workers=settings.upload_max_workers)
    app.state.upload_service = build_upload_service(settings, runner)

    yield

    # Shutdown
    logger.info("Upload API shutting down")
    app.state.upload_service = None
    runner.shutdown(wait=True)


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Background file upload service.

        Files are accepted, buffered locally and written to object storage
        on a worker thread. Responses return as soon as the upload is
        scheduled and carry the key the object will be stored under.

        ## Authentication

        All upload endpoints require an API key in the `X-API-Key` header.

        ## Endpoints

        - `POST /api/v1/files`: store under `<filename>_<timestamp>`
        - `PUT /api/v1/blog-images/{image_id}`: store (or replace) under `image_id`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        uploads.router,
        prefix="/api/v1",
        tags=["Uploads"],
    )

    # Root endpoint
    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": settings.api_title,
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Logs the full error server-side but returns a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error."}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


# For debugging/development
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
