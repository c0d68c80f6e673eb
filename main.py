#!/usr/bin/env python3
"""
PIM Asset Sync Service - Inspection API

This module configures the FastAPI application exposing the synchronization
queue to operators: health, entry listing, single entry lookup and queue
statistics.
"""

import os
import sys
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, Depends, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from infra.settings.settings import get_settings
from infra.integration.sync_service_manager import SyncServiceManager, startup_handler, shutdown_handler
from infra.dependencies.database import get_service_manager
from interfaces.schemas.queue_schemas import HealthResponse
from api.queue_router import router as queue_router

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager opening and closing the queue store connection.
    """
    logger.info("🚀 Starting PIM Asset Sync Service")

    settings = get_settings()
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Database: {settings.database.host}:{settings.database.port}/{settings.database.name}")

    try:
        await startup_handler()
    except Exception as e:
        logger.warning(f"⚠️ Startup problems, API will retry on first request: {str(e)}")

    logger.info("✅ Application startup completed")

    yield

    logger.info("🛑 Shutting down PIM Asset Sync Service")
    await shutdown_handler()
    logger.info("✅ Application shutdown completed")


def create_application() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Registers request logging, the JSON error handlers, the queue router
    and the health endpoints.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Inspection API for the PIM to catalog asset synchronization queue",
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()

        if request.url.path == "/health":
            return await call_next(request)

        logger.info(f"📥 {request.method} {request.url.path}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"📤 {request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)")

        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": {
                    "type": "http_error",
                    "message": exc.detail,
                    "status_code": exc.status_code
                },
                "timestamp": time.time()
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Request validation error handler with field-level details.
        """
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "error": {
                    "type": "validation_error",
                    "message": "Request validation failed",
                    "details": exc.errors()
                },
                "timestamp": time.time()
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "error": {
                    "type": "internal_server_error",
                    "message": "An unexpected error occurred",
                    "error_id": f"err_{int(time.time())}"
                },
                "timestamp": time.time()
            }
        )

    app.include_router(queue_router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check(manager: SyncServiceManager = Depends(get_service_manager)):
        """
        Service health check reporting whether the queue store is reachable.
        """
        database_healthy = await manager.database.health_check()

        return HealthResponse(
            status="healthy" if database_healthy else "degraded",
            service="pim-asset-sync",
            version=settings.app_version,
            database=database_healthy,
            timestamp=time.time()
        )

    @app.get("/")
    async def root():
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "status": "running",
            "docs_url": "/docs" if settings.debug else None
        }

    return app


app = create_application()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
        access_log=True
    )
