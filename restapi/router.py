"""Application configuration and router setup."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi.middleware import cors
from fastapi.openapi.utils import get_openapi

from components.core import config, init_db
from restapi.endpoints import auth, health_check, payments, plan
from restapi.errors import register_error_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    config.validate_settings(config.get_settings())
    await init_db.init_db()
    logger.info("Database schema ready")
    yield
    await init_db.db_manager.dispose()


def create_app() -> fastapi.FastAPI:
    """Create and configure the FastAPI application."""
    settings = config.get_settings()
    app = fastapi.FastAPI(
        title=settings.APP_NAME,
        description="Debt and payment plan tracking API",
        version=settings.API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        cors.CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(health_check.router)
    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(plan.router, prefix=settings.API_PREFIX)
    app.include_router(payments.router, prefix=settings.API_PREFIX)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        openapi_schema = get_openapi(
            title=settings.APP_NAME,
            version=settings.API_VERSION,
            description="Debt and payment plan tracking API",
            routes=app.routes,
        )
        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app
