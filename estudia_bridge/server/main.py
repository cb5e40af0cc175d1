"""
Local Development Server.

Runs the bridge behind FastAPI so it can be exercised without deploying to
Lambda::

    uvicorn estudia_bridge.server.main:app --reload

Every request is converted into an API Gateway REST (v1) proxy event and sent
through the same `RequestDispatcher` the Lambda handler uses, so routing,
validation and CORS headers behave identically.
"""

from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, Request, Response

from estudia_bridge.core.config import settings
from estudia_bridge.core.logging_config import get_logger, setup_logging
from estudia_bridge.server.deps import DispatcherDep
from estudia_bridge.server.exception_handlers import setup_exception_handlers

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.service_name} {settings.version} (local)")
    if not settings.mcp_server_url:
        logger.warning("MCP_SERVER_URL is not set; tool endpoints will answer 500 until it is configured")
    yield
    logger.info(f"Shutting down {settings.service_name}...")


app = FastAPI(
    title=settings.service_name,
    description="Local HTTP front for the EstudIA Lambda MCP bridge.",
    version=settings.version,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
)

setup_exception_handlers(app)


async def request_to_event(request: Request) -> Dict[str, Any]:
    """Build an API Gateway REST proxy event from a Starlette request."""
    raw = await request.body()
    return {
        "httpMethod": request.method,
        "path": request.url.path,
        "queryStringParameters": dict(request.query_params) or None,
        "headers": dict(request.headers),
        "body": raw.decode("utf-8") if raw else None,
        "isBase64Encoded": False,
    }


@app.api_route("/{full_path:path}", methods=["GET", "POST", "OPTIONS"], include_in_schema=False)
async def bridge(request: Request, dispatcher: DispatcherDep) -> Response:
    event = await request_to_event(request)
    result = await dispatcher.dispatch(event)
    return Response(content=result["body"], status_code=result["statusCode"], headers=result["headers"])
