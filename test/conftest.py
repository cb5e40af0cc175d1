from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
import pytest

# Load dotenv files early so settings-based fixtures see the same values as a local run
try:  # pragma: no cover
    from dotenv import load_dotenv

    TEST_ROOT = Path(__file__).resolve().parent
    load_dotenv(TEST_ROOT / ".env", override=False)
except Exception:
    pass

from estudia_bridge.core.config import Settings
from estudia_bridge.mcp_client.client import McpToolClient
from estudia_bridge.mcp_client.schemas.config import McpClientConfig

MOCK_BASE_URL = "http://mock"


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "http://testserver",
        "/",  # Allow relative paths (used by ASGI transport)
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)


class RecordingBackend:
    """MockTransport handler that records every request and answers from a route map.

    Routes map ``(method, path)`` to either an ``httpx.Response`` or a callable
    taking the request and returning one. Unmatched requests get a 404.
    """

    def __init__(
        self,
        routes: Optional[Dict[tuple, Any]] = None,
    ) -> None:
        self.routes: Dict[tuple, Any] = dict(routes or {})
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self.routes.get((request.method, request.url.path))
        if answer is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(answer):
            return answer(request)
        return answer

    def json_bodies(self) -> List[Any]:
        return [json.loads(r.content.decode("utf-8")) for r in self.requests]

    def paths(self) -> List[str]:
        return [r.url.path for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self), base_url=MOCK_BASE_URL)


@pytest.fixture
def make_backend() -> Callable[..., RecordingBackend]:
    def _make(routes: Optional[Dict[tuple, Any]] = None) -> RecordingBackend:
        return RecordingBackend(routes)

    return _make


@pytest.fixture
def make_mcp_client() -> Callable[..., McpToolClient]:
    def _make(backend: RecordingBackend, base_url: str = MOCK_BASE_URL) -> McpToolClient:
        return McpToolClient(McpClientConfig(base_url=base_url), client=backend.client())

    return _make


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        MCP_SERVER_URL=MOCK_BASE_URL,
        ESTUDIA_BRIDGE_ENVIRONMENT="production",
        ESTUDIA_BRIDGE_SERVICE_NAME="EstudIA Lambda - MCP Bridge",
        ESTUDIA_BRIDGE_VERSION="3.0.0",
    )
