"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from storefront.adapters.repository import (
    BackupStorage,
    InMemoryStorage,
    PeriodicSnapshotter,
    PostgresStorage,
    SnapshotWriter,
    run_migrations,
    seed_storage,
)
from storefront.adapters.sms.console import ConsoleSmsSender
from storefront.adapters.smtp.console import ConsoleEmailSender
from storefront.adapters.smtp.server import SmtpEmailSender
from storefront.api.errors import register_exception_handlers
from storefront.api.routes import api_router
from storefront.api.sessions import SessionStore
from storefront.config.settings import Settings, get_settings
from storefront.domain.notifications import NotificationService
from storefront.domain.ports import Storage

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {"name": "auth", "description": "Registration with email verification, login, password reset"},
    {"name": "products", "description": "Public product catalog"},
    {"name": "inventory", "description": "Stock adjustments and the inventory ledger"},
    {"name": "admin", "description": "User management and product administration"},
    {"name": "users", "description": "Profile, preferences and addresses"},
    {"name": "contact", "description": "Contact form"},
]


def build_notifier(settings: Settings) -> NotificationService:
    """Email sender per ``email_backend``; console SMS when enabled."""
    if settings.email_backend == "smtp":
        email_sender = SmtpEmailSender(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            sender=settings.email_from,
            dev_mode=settings.dev_mode,
        )
    else:
        email_sender = ConsoleEmailSender()
    sms_sender = ConsoleSmsSender() if settings.sms_enabled else None
    return NotificationService(email_sender=email_sender, sms_sender=sms_sender)


def build_storage(settings: Settings, pool: ConnectionPool | None = None) -> Storage:
    """Base storage for the configured backend, seeded when requested."""
    if settings.storage_backend == "postgres":
        if pool is None:
            raise ValueError("postgres storage requires a connection pool")
        storage: Storage = PostgresStorage(pool)
    else:
        storage = InMemoryStorage()
    if settings.seed_sample_data:
        seed_storage(
            storage,
            settings.admin_email,
            settings.admin_password,
            bcrypt_rounds=settings.bcrypt_cost,
        )
    return storage


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the configured storage unless one was injected
    - For Postgres: creates the connection pool and runs migrations
    - Wraps storage for user-data snapshots and starts the periodic job
    - Stops the snapshot job and closes the pool on shutdown
    """
    settings: Settings = app.state.settings
    pool: ConnectionPool | None = None
    snapshotter: PeriodicSnapshotter | None = None

    logger.info("Starting application...")

    if getattr(app.state, "storage", None) is None:
        if settings.storage_backend == "postgres":
            logger.info("Connecting to database...")
            pool = ConnectionPool(
                conninfo=settings.database_url,
                min_size=settings.pool_min_size,
                max_size=settings.pool_max_size,
            )
            logger.info("Running database migrations...")
            run_migrations(pool)

        storage = build_storage(settings, pool)
        if settings.snapshot_enabled:
            writer = SnapshotWriter(storage, settings.snapshot_path)
            storage = BackupStorage(storage, writer)
            snapshotter = PeriodicSnapshotter(writer, settings.snapshot_interval_seconds)
            snapshotter.start()
        app.state.storage = storage
        logger.info("Using %s storage", settings.storage_backend)

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if snapshotter is not None:
        snapshotter.stop()
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        storage: Pre-built storage; when omitted it is created at startup
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="storefront",
        description="Clothing storefront API - catalog, verified registration, inventory ledger",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.notifier = build_notifier(settings)
    app.state.sessions = SessionStore(settings.session_max_age_seconds)

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with storage validation.

        Returns 200 OK if the application can read from its storage.
        """
        request.app.state.storage.list_products()
        return {"status": "healthy"}

    return app


app = create_app()
