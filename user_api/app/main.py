"""
Main entrypoint for the User API.

This module assembles the FastAPI application: logging, the database
engine, the repository and service objects, middleware, exception
handlers and routers.  ``create_app`` builds everything from a
``Settings`` instance, so it can be served with::

    uvicorn --factory user_api.app.main:create_app

or through ``run.py``, which also configures graceful shutdown.

The database is contacted only when the application starts (lifespan
startup): connectivity is checked and the schema created.  If either
step fails the exception propagates and the server never accepts
traffic.  On shutdown the connection pool is released.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.endpoints import health
from .api.router import router as api_router
from .core.config import Settings
from .core.db import close_db, create_database_engine, init_db, ping
from .core.errors import StorageError
from .core.logging_config import setup_logging
from .core.middleware import register_middleware
from .repositories.user_repository import UserRepository
from .services.user_service import UserService

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """Reduce FastAPI's error list to the single message we return."""
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = tuple(first.get("loc", ()))
    if first.get("type") == "json_invalid" or loc == ("body",):
        return "invalid JSON"
    if loc[:1] == ("path",):
        return "invalid user id"
    field = ".".join(str(part) for part in loc[1:]) or str(loc[0])
    message = str(first.get("msg", "invalid value"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return f"{field}: {message}"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as ``{"error": "<message>"}``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    @app.exception_handler(StorageError)
    async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Read from the environment when omitted.
    engine : Optional[Engine]
        Pre-built database engine.  When omitted one is created from
        ``settings``.  The engine is disposed when the application
        shuts down either way.

    Returns
    -------
    FastAPI
        A configured application instance ready to be served.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level, settings.log_file)

    engine = engine or create_database_engine(settings)
    user_service = UserService(UserRepository(engine))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            ping(engine)
            init_db(engine)
        except Exception:
            logger.critical("Database startup failed; refusing to serve requests", exc_info=True)
            raise
        yield
        close_db(engine)

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.user_service = user_service

    register_middleware(app)
    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(api_router, prefix="/api")

    return app
