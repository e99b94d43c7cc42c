"""
Bookstore catalog integrity API
"""
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse

from bookcatalog.api.v1 import api_router
from bookcatalog.core.config import settings
from bookcatalog.core.exceptions import BaseAPIException, handle_api_exception, handle_unexpected_exception
from bookcatalog.core.logging import log, setup_logging
from bookcatalog.middleware import RequestIDMiddleware, TimingMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events
    """
    setup_logging()
    log.info(
        "Starting catalog integrity API",
        version=settings.VERSION,
        env=settings.ENVIRONMENT,
        catalog_api=settings.catalog_api_url,
    )

    yield

    log.info("Shutting down catalog integrity API")


def create_application() -> FastAPI:
    """
    Create FastAPI application with all configurations
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json" if settings.DEBUG else None,
        docs_url=f"{settings.API_V1_STR}/docs" if settings.DEBUG else None,
        redoc_url=f"{settings.API_V1_STR}/redoc" if settings.DEBUG else None,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        debug=settings.DEBUG,
        openapi_tags=[
            {"name": "health", "description": "Health check endpoints"},
            {"name": "categories", "description": "Category hierarchy and parent assignment"},
            {"name": "formats", "description": "Format validation and pricing"},
            {"name": "media", "description": "Media role reconciliation"},
            {"name": "products", "description": "Product edit sessions and saving"},
        ],
    )

    app.add_exception_handler(BaseAPIException, handle_api_exception)
    app.add_exception_handler(Exception, handle_unexpected_exception)

    # Middleware stack, outermost first
    if settings.BACKEND_CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(TimingMiddleware)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.get("/", tags=["root"])
    async def root() -> Dict[str, Any]:
        """Root endpoint with API information"""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "docs": f"{settings.API_V1_STR}/docs" if settings.DEBUG else None,
            "openapi": f"{settings.API_V1_STR}/openapi.json" if settings.DEBUG else None,
        }

    return app


# Create the application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "bookcatalog.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS if not settings.DEBUG else 1,
        log_config=None,
        access_log=False,
        server_header=False,
    )
