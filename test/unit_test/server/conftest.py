from typing import Any, AsyncGenerator, Callable, Dict, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from estudia_bridge.core.config import Settings
from estudia_bridge.server.deps import build_dispatcher, get_dispatcher
from estudia_bridge.server.dispatcher import RequestDispatcher


def api_event(
    path: str,
    method: str = "POST",
    *,
    query: Optional[Dict[str, str]] = None,
    body: Optional[str] = None,
    base64_encoded: bool = False,
) -> Dict[str, Any]:
    """Build an API Gateway REST (v1) proxy event."""
    return {
        "httpMethod": method,
        "path": path,
        "queryStringParameters": query,
        "headers": {"content-type": "application/json"},
        "body": body,
        "isBase64Encoded": base64_encoded,
    }


@pytest.fixture
def event_factory() -> Callable[..., Dict[str, Any]]:
    return api_event


@pytest.fixture
def mcp_result() -> httpx.Response:
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": "call-1", "result": {"ok": True}})


@pytest.fixture
def backend(make_backend, mcp_result):
    """Recording MCP backend that answers every ``/mcp`` call with ``mcp_result``."""
    return make_backend({("POST", "/mcp"): mcp_result})


@pytest.fixture
def dispatcher(backend, test_settings: Settings) -> RequestDispatcher:
    return build_dispatcher(test_settings, client=backend.client())


@pytest_asyncio.fixture
async def client(backend, test_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the local FastAPI app, wired to the recording backend."""
    from estudia_bridge.server.main import app

    app.dependency_overrides[get_dispatcher] = lambda: build_dispatcher(test_settings, client=backend.client())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()
