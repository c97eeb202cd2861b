"""
FastAPI application factory for scaffolded resources.

Usage:
    from scaffold_api.main import create_app
    from scaffold_api.routers import resource_router, controller_factory

    app = create_app(
        resource_router(CUSTOMERS, controller_factory(CUSTOMERS, CUSTOMER_CONFIG)),
        resource_router(ORDERS, controller_factory(ORDERS, ORDER_CONFIG)),
    )
"""

from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI

from scaffold_api.models import Base
from scaffold_shared.config.logging import setup_logging, api_logger as logger
from scaffold_shared.config.settings import settings
from scaffold_shared.infrastructure.correlation import CorrelationIdMiddleware
from scaffold_shared.infrastructure.db import engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs on startup and shutdown.
    """
    setup_logging()

    config_errors = settings.validate_production_settings()
    if config_errors:
        for error in config_errors:
            logger.error("Configuration error: %s", error)
        if settings.environment == "production":
            raise RuntimeError(f"Production configuration errors: {'; '.join(config_errors)}")

    logger.info("Starting scaffold API", env=settings.environment, resources=len(app.state.resources))

    if app.state.create_tables:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")

    yield

    logger.info("Shutting down scaffold API")


def create_app(
    *routers: APIRouter,
    title: str = "Scaffold API",
    create_tables: bool = True,
) -> FastAPI:
    """
    Build the application and mount the given resource routers.

    Args:
        routers: Routers built with resource_router()
        title: OpenAPI title
        create_tables: Create missing tables on startup
    """
    app = FastAPI(title=title, version="0.1.0", lifespan=lifespan)
    app.state.create_tables = create_tables
    app.state.resources = [router.prefix for router in routers]

    app.add_middleware(CorrelationIdMiddleware)

    @app.get("/api/health", tags=["health"])
    def health_check():
        """Basic liveness check."""
        return {"status": "ok", "service": "scaffold-api"}

    for router in routers:
        app.include_router(router)

    return app
