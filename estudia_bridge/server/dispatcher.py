"""
Request Dispatcher.

Turns an API Gateway / Lambda event into an operation name plus a flat
Parameter Bag, hands it to the `ToolCallAdapter`, and renders the result as a
Lambda proxy response (status code, CORS headers, JSON string body).

Supported event shapes:
- API Gateway REST (v1): ``httpMethod``, ``path``, ``queryStringParameters``, ``body``
- API Gateway HTTP (v2): ``rawPath``, ``requestContext.http.method``
- Direct invocation: the event itself is the Parameter Bag
"""

from __future__ import annotations

import base64
import binascii
import json
import traceback
from typing import Any, Dict, Mapping, Optional

from estudia_bridge.bridge.adapter import ToolCallAdapter
from estudia_bridge.bridge.envelope import utc_timestamp
from estudia_bridge.bridge.operations import OPERATIONS, ROUTE_ORDER, OperationDescriptor
from estudia_bridge.core.config import Settings
from estudia_bridge.core.logging_config import get_logger
from estudia_bridge.mcp_client.transport.http import loads_strict

logger = get_logger(__name__)

HEALTH = "health"
INFO = "info"
UNKNOWN = "unknown"

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

SERVICE_DESCRIPTION = (
    "HTTP bridge connecting apps with the EstudIA MCP server "
    "(NotebookLM-style classroom management system)"
)


class InvalidRequestBodyError(ValueError):
    pass


def create_response(status_code: int, body: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": json.dumps(body, ensure_ascii=False, allow_nan=False, default=str),
    }


def get_path(event: Mapping[str, Any]) -> str:
    request_context = event.get("requestContext") or {}
    path = event.get("path") or event.get("rawPath") or request_context.get("resourcePath") or ""
    return path[:-1] if path.endswith("/") else path


def get_method(event: Mapping[str, Any]) -> Optional[str]:
    method = event.get("httpMethod")
    if not method:
        method = ((event.get("requestContext") or {}).get("http") or {}).get("method")
    return method.upper() if isinstance(method, str) else None


def resolve_endpoint(path: str, operations: Mapping[str, OperationDescriptor] = OPERATIONS) -> str:
    """Map a normalized path to an operation key, ``health``, ``info`` or ``unknown``.

    Matching is by substring over each operation's route aliases, in
    `ROUTE_ORDER`, so more specific aliases win.

    Examples:
        >>> resolve_endpoint("/prod/create-embedding")
        'create-embedding'
        >>> resolve_endpoint("/embedding")
        'generate-embedding'
        >>> resolve_endpoint("")
        'info'
    """
    for key in ROUTE_ORDER:
        op = operations.get(key)
        if op is not None and any(route in path for route in op.routes):
            return key
    if "/health" in path:
        return HEALTH
    if path in ("/", "", "/info"):
        return INFO
    return UNKNOWN


def _decode_body(event: Mapping[str, Any]) -> Dict[str, Any]:
    body = event.get("body")
    if not body:
        return {}
    if isinstance(body, Mapping):
        return dict(body)
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise InvalidRequestBodyError(f"Request body is not valid base64: {e}") from e
    try:
        parsed = loads_strict(body)
    except ValueError as e:
        raise InvalidRequestBodyError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise InvalidRequestBodyError("Request body must be a JSON object")
    return parsed


def extract_params(event: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge query string and body into one Parameter Bag; the body wins on collisions."""
    query = event.get("queryStringParameters")
    body = event.get("body")
    if not query and not body and get_method(event) is None:
        # direct invocation (e.g. `aws lambda invoke`)
        return dict(event)
    params: Dict[str, Any] = dict(query or {})
    params.update(_decode_body(event))
    return params


class RequestDispatcher:
    """Route Lambda events to the adapter and render proxy responses.

    Args:
        adapter: The tool-call adapter.
        settings: Service settings (name, version, backend URL, environment).
    """

    def __init__(self, adapter: ToolCallAdapter, *, settings: Settings) -> None:
        self._adapter = adapter
        self._settings = settings

    @property
    def operations(self) -> Mapping[str, OperationDescriptor]:
        return self._adapter.operations

    async def dispatch(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        method = get_method(event)
        if method == "OPTIONS":
            return create_response(200, {"message": "OK"})

        try:
            path = get_path(event)
            endpoint = resolve_endpoint(path, self.operations)
            logger.info(f"Dispatch: method={method or 'INVOKE'} path={path!r} endpoint={endpoint}")

            if endpoint == HEALTH:
                return create_response(200, self.health_body())
            if endpoint == INFO:
                return create_response(200, self.info_body())
            if endpoint == UNKNOWN:
                return create_response(404, self.not_found_body(endpoint, event))

            try:
                params = extract_params(event)
            except InvalidRequestBodyError as e:
                logger.warning(f"Dispatch: rejected body for {endpoint}: {e}")
                return create_response(
                    400,
                    {
                        "error": str(e),
                        "hint": "Send a JSON object as the request body",
                        "timestamp": utc_timestamp(),
                    },
                )

            result = await self._adapter.invoke(endpoint, params)
            return create_response(result.status_code, result.body)
        except Exception as e:
            logger.error(f"Dispatch: unhandled error: {e}", exc_info=True)
            body: Dict[str, Any] = {"error": str(e) or type(e).__name__, "timestamp": utc_timestamp()}
            if self._settings.is_development:
                body["stack"] = traceback.format_exc()
            return create_response(500, body)

    def health_body(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "service": self._settings.service_name,
            "version": self._settings.version,
            "mcp_server": self._settings.mcp_server_url or None,
            "timestamp": utc_timestamp(),
        }

    def info_body(self) -> Dict[str, Any]:
        ops = [self.operations[k] for k in ROUTE_ORDER if k in self.operations]
        return {
            "service": self._settings.service_name,
            "version": self._settings.version,
            "description": SERVICE_DESCRIPTION,
            "mcp_server": self._settings.mcp_server_url or None,
            "endpoints": {HEALTH: "/health", **{op.key: op.path for op in ops}},
            "usage": {op.key: {**op.usage(), "description": op.description} for op in ops},
            "timestamp": utc_timestamp(),
        }

    def available_endpoints(self) -> list[str]:
        return ["/health"] + [self.operations[k].path for k in ROUTE_ORDER if k in self.operations]

    def not_found_body(self, endpoint: str, event: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "error": "Endpoint not found",
            "endpoint_requested": endpoint,
            "path": event.get("path") or event.get("rawPath") or "N/A",
            "method": get_method(event) or "N/A",
            "available_endpoints": self.available_endpoints(),
            "tip": "Open / or /info for the full documentation",
            "timestamp": utc_timestamp(),
        }
