from __future__ import annotations

import json

import httpx
import pytest

from estudia_bridge.mcp_client.errors import McpTransportError
from estudia_bridge.mcp_client.schemas.config import McpClientConfig
from estudia_bridge.mcp_client.transport.http import (
    JSON_ACCEPT,
    JSON_AND_SSE_ACCEPT,
    HttpToolTransport,
    ParsedOk,
    ParsedRaw,
    extract_sse_data,
    loads_strict,
    parse_response,
)


def _sse_response(text: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, headers={"content-type": "text/event-stream"}, content=text.encode("utf-8"))


def test_extract_sse_data_returns_first_data_line() -> None:
    text = 'event: message\ndata: {"a": 1}\ndata: {"b": 2}\n\n'
    assert extract_sse_data(text) == '{"a": 1}'


def test_extract_sse_data_without_data_line() -> None:
    assert extract_sse_data(": keepalive\n\nevent: ping\n\n") is None


def test_parse_response_sse_first_data_line_is_json() -> None:
    parsed = parse_response(_sse_response('event: message\ndata: {"result": {"ok": 1}}\n\n'))
    assert isinstance(parsed, ParsedOk)
    assert parsed.status_code == 200
    assert parsed.body == {"result": {"ok": 1}}


def test_parse_response_sse_with_non_json_data_falls_back_to_raw() -> None:
    parsed = parse_response(_sse_response("event: message\ndata: not json at all\n\n"))
    assert isinstance(parsed, ParsedRaw)
    assert parsed.text.startswith("event: message")
    assert parsed.body == parsed.text


def test_parse_response_sse_content_type_but_plain_json_body() -> None:
    # the data line is missing, but the whole body is still valid JSON
    parsed = parse_response(_sse_response('{"result": "direct"}'))
    assert isinstance(parsed, ParsedOk)
    assert parsed.body == {"result": "direct"}


def test_parse_response_plain_json() -> None:
    parsed = parse_response(httpx.Response(500, json={"error": {"code": -32000}}))
    assert isinstance(parsed, ParsedOk)
    assert parsed.status_code == 500
    assert parsed.body == {"error": {"code": -32000}}


def test_parse_response_non_json_is_raw_text() -> None:
    parsed = parse_response(httpx.Response(200, content=b"plain text reply"))
    assert isinstance(parsed, ParsedRaw)
    assert parsed.text == "plain text reply"


@pytest.mark.asyncio
async def test_post_json_sends_json_and_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"result": "ok"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")
    transport = HttpToolTransport(McpClientConfig(base_url="http://mock"), client=client)

    parsed = await transport.post_json("http://mock/mcp", {"x": 1}, tool_name="t")

    assert isinstance(parsed, ParsedOk)
    assert parsed.body == {"result": "ok"}
    assert len(seen) == 1
    req = seen[0]
    assert req.method == "POST"
    assert req.url.path == "/mcp"
    assert req.headers["content-type"] == "application/json"
    assert req.headers["accept"] == JSON_AND_SSE_ACCEPT
    assert req.headers["user-agent"] == "EstudIA-Lambda-Bridge"
    assert json.loads(req.content) == {"x": 1}


@pytest.mark.asyncio
async def test_post_json_custom_accept_header() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")
    transport = HttpToolTransport(McpClientConfig(base_url="http://mock"), client=client)

    await transport.post_json("http://mock/tools/t/call", {}, tool_name="t", accept=JSON_ACCEPT)

    assert seen[0].headers["accept"] == "application/json"


@pytest.mark.asyncio
async def test_post_json_network_error_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")
    transport = HttpToolTransport(McpClientConfig(base_url="http://mock"), client=client)

    with pytest.raises(McpTransportError) as ei:
        await transport.post_json("http://mock/mcp", {}, tool_name="generate_embedding")

    assert ei.value.tool_name == "generate_embedding"
    assert str(ei.value) == "Error connecting to MCP server: connection refused"


@pytest.mark.asyncio
async def test_post_json_timeout_raises_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://mock")
    transport = HttpToolTransport(McpClientConfig(base_url="http://mock"), client=client)

    with pytest.raises(McpTransportError, match="timed out"):
        await transport.post_json("http://mock/mcp", {}, tool_name="t")


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_parse_response_rejects_non_standard_constants(literal: str) -> None:
    text = '{"result": {"score": %s}}' % literal
    parsed = parse_response(httpx.Response(200, content=text.encode("utf-8")))

    assert isinstance(parsed, ParsedRaw)
    assert parsed.text == text


def test_parse_response_sse_with_nan_is_raw_text() -> None:
    parsed = parse_response(_sse_response('event: message\ndata: {"result": {"score": NaN}}\n\n'))
    assert isinstance(parsed, ParsedRaw)


def test_loads_strict_accepts_ordinary_floats() -> None:
    assert loads_strict('{"score": 0.87, "v": [1e-3, -2.5]}') == {"score": 0.87, "v": [1e-3, -2.5]}
    with pytest.raises(ValueError):
        loads_strict("[NaN]")
