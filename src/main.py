"""taskdeck - per-user task tracker API."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.db_client import DatabaseError, SQLiteDocumentStore
from src.core.logging import configure_logfire, instrument_fastapi
from src.core.security import PasswordHasher, TokenService
from src.interface.auth_router import router as auth_router
from src.interface.responses import install_error_handlers
from src.interface.tasks_router import router as tasks_router


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> str:
    """Validate required credentials, exiting the process if any are missing.

    A missing signing secret is a fatal startup condition, never a per-request error.

    Returns:
        The session signing secret
    """
    logger.info("startup_validation_begin")

    try:
        secret_key = settings.require_credential("secret_key", "Secret key for session signing")
    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    logger.info("startup_validation_complete", extra={"status": "ok"})
    return secret_key


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    # Configure logging first so validation logs are captured
    configure_logfire()

    secret_key = validate_startup_configuration()
    app.state.token_service = TokenService(secret_key, settings.token_ttl_seconds)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)

    document_store = SQLiteDocumentStore(settings.sqlite_db_path)
    try:
        await document_store.connect()
    except DatabaseError as e:
        logger.error("startup_database_failed", extra={"error": str(e)})
        print(f"\n❌ Could not open the document store: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)
    app.state.document_store = document_store
    logger.info("Document store initialized")

    yield
    # Shutdown
    await document_store.close()


def create_app() -> FastAPI:
    """Build the FastAPI application with routers and error handlers."""
    application = FastAPI(
        title="taskdeck",
        description="Per-user task tracker",
        version="0.1.0",
        lifespan=lifespan,
        # no interactive docs in production
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
    )

    install_error_handlers(application)
    application.include_router(auth_router)
    application.include_router(tasks_router)

    @application.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(content={"status": "healthy"}, status_code=200)

    return application


app = create_app()

# Instrument FastAPI with Logfire
instrument_fastapi(app)
