"""Main FastAPI application module.

This module initializes the FastAPI application and registers all route handlers.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.logging_config import setup_logging
from config import (
    CORS_ALLOWED_ORIGINS,
    API_HOST,
    API_PORT,
    SEED_DEMO_DATA,
)
from api.routes import auth, training, assessments, documents, incidents
from api.routes import notifications, dashboard
from core.dependencies import build_entity_store
from core.exceptions import (
    DuplicateRecordError,
    RecordNotFoundError,
    StorageOperationError,
    UploadRejectedError,
)
from storage.base import EntityStore
from utils.seed import seed_store

logger = logging.getLogger(__name__)

API_TITLE = "SafetyHub API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Workplace safety records: training, assessments, incidents."


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordNotFoundError)
    async def record_not_found(request: Request, exc: RecordNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc)},
        )

    @app.exception_handler(DuplicateRecordError)
    async def duplicate_record(request: Request, exc: DuplicateRecordError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(UploadRejectedError)
    async def upload_rejected(request: Request, exc: UploadRejectedError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(StorageOperationError)
    async def storage_failure(request: Request, exc: StorageOperationError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal storage error"},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_failed(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Validation failed", "errors": errors},
        )


def create_app(entity_store: Optional[EntityStore] = None) -> FastAPI:
    """Build the application.

    Args:
        entity_store: Store to serve from. When omitted, the store selected by
            ``STORAGE_BACKEND`` is built on startup.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
    )

    # Configure CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register route handlers
    app.include_router(auth.router)
    app.include_router(dashboard.router)
    app.include_router(training.router)
    app.include_router(assessments.router)
    app.include_router(documents.router)
    app.include_router(incidents.router)
    app.include_router(notifications.router)

    _register_exception_handlers(app)

    app.state.entity_store = entity_store
    app.state.mongo_connection = None

    @app.on_event("startup")
    async def startup_tasks() -> None:
        """Build the configured store and seed demo data if enabled."""
        if app.state.entity_store is None:
            store, connection = build_entity_store()
            app.state.entity_store = store
            app.state.mongo_connection = connection
        if SEED_DEMO_DATA:
            await seed_store(app.state.entity_store)

    @app.on_event("shutdown")
    def shutdown_tasks() -> None:
        if app.state.mongo_connection is not None:
            app.state.mongo_connection.disconnect()

    @app.get("/", summary="API root", tags=["Info"])
    def root() -> dict:
        """API root, returns API information and documentation links."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "docs": {
                "swagger": "/docs",
                "redoc": "/redoc",
            },
            "health": "/api/health",
        }

    @app.get("/api/health", summary="Health check", tags=["Health"])
    def health() -> dict:
        """Health check endpoint.

        Returns:
            Dictionary with status "ok".
        """
        return {"status": "ok"}

    return app


# Setup logging
setup_logging()

app = create_app()


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    print(f"Starting SafetyHub API at {server_url}")
    print(f"API docs: {server_url}/docs")

    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
