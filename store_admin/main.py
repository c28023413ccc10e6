"""
FastAPI Application

Main entry point for the Store Admin API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from store_admin.config import get_settings
from store_admin.config.logging import configure_logging
from store_admin.database.connection import init_database, close_database
from store_admin.exceptions import StoreAdminError
from store_admin.serving.cache import init_redis, close_redis
from store_admin.serving.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from store_admin.serving.api.routes import (
    health_router,
    dashboard_router,
    orders_router,
    products_router,
    customers_router,
    analytics_router,
)

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()
    logger.info("Starting Store Admin API", environment=settings.app_env)

    await init_database()

    # The API serves uncached when Redis is unreachable
    try:
        await init_redis()
    except Exception as e:
        logger.warning("Redis init failed, caching disabled", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_redis()
    await close_database()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Store Admin API",
        description="Products, orders, customers and analytics for the store admin dashboard",
        version=settings.version,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(StoreAdminError)
    async def store_admin_error_handler(request: Request, exc: StoreAdminError) -> JSONResponse:
        logger.info(
            "Request rejected",
            path=request.url.path,
            error_type=type(exc).__name__,
            status_code=exc.status_code,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "errors": exc.details},
        )

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(dashboard_router, prefix="/api/v1", tags=["Dashboard"])
    app.include_router(orders_router, prefix="/api/v1/orders", tags=["Orders"])
    app.include_router(products_router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(customers_router, prefix="/api/v1/customers", tags=["Customers"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Store Admin API",
            "version": settings.version,
            "environment": settings.app_env,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
