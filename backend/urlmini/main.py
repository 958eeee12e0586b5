"""urlmini - FastAPI Application Factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from urlmini.api import auth_router, health_router, links_router, redirect_router, users_router
from urlmini.core import engine, get_settings, setup_logging
from urlmini.core.config import Settings
from urlmini.core.logging import get_logger
from urlmini.middleware import AuthenticationMiddleware, IdentityLivenessMiddleware

# Import all models to ensure they're registered with Base for Alembic
from urlmini.models import Link, Session, User  # noqa: F401
from urlmini.services.store import StoreFactory, database_store
from urlmini.services.token_codec import TokenCodec

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings: Settings = app.state.settings
    setup_logging(level=settings.log_level, format_type=settings.log_format)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    yield

    logger.info("Shutting down...")
    await engine.dispose()


def create_app(
    settings: Settings | None = None,
    store_factory: StoreFactory | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The TokenCodec is built here, once, from the configured symmetric key. A
    key of the wrong length fails application construction rather than the
    first request.
    """
    settings = settings or get_settings()
    store_factory = store_factory or database_store
    codec = TokenCodec(settings.token_key_bytes)

    app = FastAPI(
        title=settings.app_name,
        description="URL shortener with token-based authentication",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.token_codec = codec
    app.state.store_factory = store_factory

    # Starlette runs middleware in reverse order of addition: authentication
    # must see the request before the identity check does.
    app.add_middleware(
        IdentityLivenessMiddleware,
        store_factory=store_factory,
        protected_paths=settings.protected_paths,
    )
    app.add_middleware(
        AuthenticationMiddleware,
        codec=codec,
        protected_paths=settings.protected_paths,
    )

    # CORS middleware - MUST be outermost so 401 responses carry CORS headers too
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
    )

    # Prometheus metrics (before routers so /metrics is matched before /{code})
    if settings.enable_metrics:
        from prometheus_fastapi_instrumentator import Instrumentator

        Instrumentator(
            excluded_handlers=["/health", "/metrics"],
        ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(links_router)
    # Catch-all short code redirect goes last
    app.include_router(redirect_router)

    return app


# Application instance
app = create_app()
