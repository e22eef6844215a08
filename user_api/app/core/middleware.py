"""
HTTP middleware: request logging and CORS.

``register_middleware`` installs both on an application.  Logging
wraps CORS, so preflight requests are logged like any other request.
"""

import logging
import time

from fastapi import FastAPI, Request, Response

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def register_middleware(app: FastAPI) -> None:
    # Middleware registered last runs first

    @app.middleware("http")
    async def cors(request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.middleware("http")
    async def log_requests(request: Request, call_next) -> Response:
        start = time.perf_counter()
        logger.info("-> %s %s", request.method, request.url.path)
        # Unhandled exceptions become a 500 further out
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "<- %s %s %s completed in %.2fms",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
            )
