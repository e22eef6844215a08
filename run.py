"""Entry point for the User API server.

Reads configuration from environment variables (see
``user_api.app.core.config``), builds the application and serves it
with Uvicorn on ``HOST``:``PORT``.

On SIGINT/SIGTERM Uvicorn stops accepting connections and waits up to
``SHUTDOWN_TIMEOUT`` seconds for in-flight requests to finish before
the application releases its database pool.

Usage:
    python run.py
"""
import asyncio
import logging
import sys

from uvicorn import Config, Server

from user_api.app.core.config import Settings
from user_api.app.core.logging_config import setup_logging
from user_api.app.main import create_app

ENDPOINTS = (
    ("GET", "/health", "Health check"),
    ("GET", "/api/users", "List users"),
    ("POST", "/api/users", "Create user"),
    ("GET", "/api/users/{id}", "Get user"),
    ("PUT", "/api/users/{id}", "Update user"),
    ("DELETE", "/api/users/{id}", "Delete user"),
)


def build_server(settings: Settings) -> Server:
    """Create a Uvicorn server for the application described by ``settings``."""
    config = Config(
        app=create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_timeout,
        reload=False,
    )
    return Server(config)


def main() -> None:
    """Serve the API until a termination signal arrives."""
    settings = Settings()
    setup_logging(settings.log_level, settings.log_file)
    logger = logging.getLogger("user_api")

    server = build_server(settings)
    logger.info("Server starting on http://%s:%s", settings.host, settings.port)
    logger.info("Available endpoints:")
    for method, path, summary in ENDPOINTS:
        logger.info("  %-6s %-16s - %s", method, path, summary)

    asyncio.run(server.serve())
    if not server.started:
        # Lifespan startup failed (database unreachable or schema error)
        sys.exit(1)
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
