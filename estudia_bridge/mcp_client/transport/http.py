"""HTTP transport for JSON-RPC and REST-style tool calls.

Built on `httpx.AsyncClient`. The whole response body is read before parsing;
nothing is consumed as a stream. Parsing never raises: a body that is neither
an SSE frame with JSON data nor a JSON document is kept as raw text.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx

from estudia_bridge.mcp_client.errors import McpTransportError
from estudia_bridge.mcp_client.schemas.config import McpClientConfig

SSE_CONTENT_TYPE = "text/event-stream"
SSE_DATA_PREFIX = "data: "

JSON_AND_SSE_ACCEPT = "application/json, text/event-stream"
JSON_ACCEPT = "application/json"


@dataclass(frozen=True)
class ParsedOk:
    """Response whose body decoded as JSON (either directly or from an SSE data line)."""

    status_code: int
    body: Any
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedRaw:
    """Response whose body could not be decoded; `text` is the body as received."""

    status_code: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def body(self) -> str:
        return self.text


ParsedResponse = Union[ParsedOk, ParsedRaw]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def loads_strict(text: str) -> Any:
    """`json.loads` that refuses `NaN`, `Infinity` and `-Infinity` with `ValueError`."""
    return json.loads(text, parse_constant=_reject_constant)


def extract_sse_data(text: str) -> Optional[str]:
    """Return the payload of the first `data: ` line in an SSE frame.

    Only the first data line is honored; later lines, including further data
    lines, are ignored.

    Examples:
        >>> extract_sse_data('event: message\\ndata: {"result": 1}\\n\\n')
        '{"result": 1}'
        >>> extract_sse_data("event: ping\\n\\n") is None
        True
    """
    for line in text.strip().splitlines():
        if line.startswith(SSE_DATA_PREFIX):
            return line[len(SSE_DATA_PREFIX):]
    return None


def parse_response(response: httpx.Response) -> ParsedResponse:
    """Parse a fully-read response into `ParsedOk` or `ParsedRaw`.

    Order:
    1. `text/event-stream`: decode the first `data: ` line as JSON.
    2. Otherwise, or if step 1 found nothing usable: decode the whole body as JSON.
    3. If that fails too: keep the raw text.

    Bodies using the non-standard `NaN` or `Infinity` literals count as
    undecodable and are kept as raw text.
    """
    headers = dict(response.headers)
    text = response.text
    content_type = response.headers.get("content-type", "")

    if SSE_CONTENT_TYPE in content_type:
        data = extract_sse_data(text)
        if data:
            try:
                return ParsedOk(status_code=response.status_code, body=loads_strict(data), headers=headers)
            except ValueError:
                pass

    try:
        return ParsedOk(status_code=response.status_code, body=loads_strict(text), headers=headers)
    except ValueError:
        return ParsedRaw(status_code=response.status_code, text=text, headers=headers)


class HttpToolTransport:
    """POST JSON payloads to the MCP server and return parsed responses.

    - If a client is injected it is reused and left open for the caller to close.
    - Otherwise a fresh `httpx.AsyncClient` is opened and closed per request, so
      no connection pool outlives a single invocation.
    - Network-level failures are raised as `McpTransportError`.
    """

    def __init__(self, config: McpClientConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._client = client
        self._logger = logging.getLogger(__name__)

    def _headers(self, accept: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": accept,
            "User-Agent": self._config.user_agent,
        }

    async def post_json(
        self,
        url: str,
        payload: Dict[str, Any],
        *,
        tool_name: str,
        accept: str = JSON_AND_SSE_ACCEPT,
    ) -> ParsedResponse:
        """POST `payload` to `url` and parse the reply.

        Args:
            url: Absolute URL of the endpoint.
            payload: JSON-serializable request body.
            tool_name: Tool being invoked, used for error context.
            accept: Value of the Accept header.

        Returns:
            `ParsedOk` or `ParsedRaw`, regardless of the HTTP status code.

        Raises:
            McpTransportError: Connection failure, timeout or an unusable URL.
        """
        self._logger.debug("HttpToolTransport.post_json: POST %s tool=%s", url, tool_name)
        try:
            if self._client is not None:
                response = await self._client.post(url, json=payload, headers=self._headers(accept))
            else:
                async with httpx.AsyncClient(
                    timeout=self._config.request_timeout_seconds, follow_redirects=True
                ) as client:
                    response = await client.post(url, json=payload, headers=self._headers(accept))
        except (httpx.RequestError, httpx.InvalidURL) as e:
            self._logger.error("HttpToolTransport.post_json: transport error for %s: %s", url, e)
            raise McpTransportError(tool_name, str(e) or type(e).__name__) from e

        parsed = parse_response(response)
        self._logger.debug(
            "HttpToolTransport.post_json: status=%s parsed=%s", parsed.status_code, type(parsed).__name__
        )
        return parsed
