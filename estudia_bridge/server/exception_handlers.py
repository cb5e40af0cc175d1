"""
Global Exception Handler for the local FastAPI app.

The dispatcher already converts errors into JSON responses; this handler is the
last resort for anything raised outside it (request body reading, dependency
construction) so the caller still receives a JSON body with CORS headers.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from estudia_bridge.bridge.envelope import utc_timestamp
from estudia_bridge.core.config import settings
from estudia_bridge.core.logging_config import get_logger
from estudia_bridge.server.dispatcher import CORS_HEADERS

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log the unhandled exception with request context and return a 500 JSON body.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with the error message and timestamp
    """
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra={
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
        },
    )
    content = {"error": str(exc) or type(exc).__name__, "timestamp": utc_timestamp()}
    if settings.is_development:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    headers = {k: v for k, v in CORS_HEADERS.items() if k != "Content-Type"}
    return JSONResponse(status_code=500, content=content, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
