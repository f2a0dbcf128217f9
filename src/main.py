"""Main application entry point for the POS ordering client.

This module provides the FastAPI application factory and configuration
for running the terminal API locally.
"""

import logging
import os

from fastapi import FastAPI

from pos_ordering_client.handlers.api_handler import create_app
from pos_ordering_client.observability import configure_logging, setup_observability
from pos_ordering_client.repositories.cache_repositories import SqliteKeyValueStore
from pos_ordering_client.services.app_context import AppContext
from pos_ordering_client.services.pos_backend_client import PosBackendClient

logger = logging.getLogger(__name__)

DEFAULT_CACHE_PATH = "~/.pos-ordering-client/cache.sqlite3"


def create_backend_client() -> PosBackendClient:
    """Create the backend client from environment variables.

    Returns:
        Configured backend client

    Raises:
        ValueError: If POS_BACKEND_BASE_URL is not set
    """
    base_url = os.getenv("POS_BACKEND_BASE_URL")
    if not base_url:
        raise ValueError("POS_BACKEND_BASE_URL must be set in environment")

    auth_token = os.getenv("POS_BACKEND_TOKEN") or None
    timeout = float(os.getenv("POS_BACKEND_TIMEOUT_SECONDS", "10"))

    logger.info(f"Backend client configured - URL: {base_url}")
    return PosBackendClient(base_url=base_url, auth_token=auth_token, timeout=timeout)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    Returns:
        Configured FastAPI application instance
    """
    log_level = os.getenv("LOG_LEVEL", "INFO")
    configure_logging(log_level)

    logger.info("Initializing POS ordering client...")

    backend_client = create_backend_client()

    cache_path = os.getenv("POS_CACHE_PATH", DEFAULT_CACHE_PATH)
    cache_store = SqliteKeyValueStore(cache_path)
    logger.info(f"Local cache at {cache_store.db_path}")

    context = AppContext(backend_client=backend_client, cache_store=cache_store)

    app = create_app(context, manage_session=True)
    setup_observability(app)

    logger.info("POS ordering client initialized successfully")
    return app


# Only build the real app outside tests so collection never needs a backend URL
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "127.0.0.1")

    logger.info(f"Starting terminal API on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
