"""Tool-call client for the EstudIA MCP server.

Calls a tool with one JSON-RPC ``tools/call`` request to ``{base}/mcp``. The
reply is handled in two steps:

1. parse (transport): JSON or SSE body -> `ParsedOk` / `ParsedRaw`
2. interpret (here): result payload, `ProtocolError`, or failure

A non-200 reply carrying JSON-RPC error ``-32600`` triggers exactly one retry
against the REST-style endpoint ``{base}/tools/{tool}/call`` with the bare
arguments. No other condition triggers that retry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from estudia_bridge.mcp_client.errors import BackendNotConfiguredError, ToolInvocationError
from estudia_bridge.mcp_client.schemas.config import McpClientConfig
from estudia_bridge.mcp_client.schemas.core import INVALID_REQUEST_CODE, JSONRPCError, JSONRPCRequest
from estudia_bridge.mcp_client.transport.http import (
    JSON_ACCEPT,
    JSON_AND_SSE_ACCEPT,
    HttpToolTransport,
    ParsedOk,
    ParsedResponse,
)


@dataclass(frozen=True)
class ProtocolError:
    """A JSON-RPC error object returned by the MCP server."""

    status_code: int
    error: JSONRPCError
    body: Any

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def is_invalid_request(self) -> bool:
        return self.error.code == INVALID_REQUEST_CODE


def as_protocol_error(parsed: ParsedResponse) -> Optional[ProtocolError]:
    """Return a `ProtocolError` if the parsed body is a JSON-RPC error envelope."""
    if not isinstance(parsed, ParsedOk) or not isinstance(parsed.body, dict):
        return None
    err = parsed.body.get("error")
    if not isinstance(err, dict):
        return None
    try:
        return ProtocolError(status_code=parsed.status_code, error=JSONRPCError.model_validate(err), body=parsed.body)
    except ValidationError:
        return None


def _serialize(body: Any) -> str:
    if isinstance(body, str):
        return json.dumps(body)
    try:
        return json.dumps(body, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(body)


class McpToolClient:
    """Invoke EstudIA tools on an MCP server.

    Example:
        client = McpToolClient(McpClientConfig(base_url="https://estudia-mcp.fastmcp.app"))
        result = await client.call_tool("generate_embedding", {"text": "hola"})
    """

    def __init__(self, config: McpClientConfig, *, client: Optional[httpx.AsyncClient] = None) -> None:
        self._config = config
        self._transport = HttpToolTransport(config, client=client)
        self._logger = logging.getLogger(__name__)

    @property
    def config(self) -> McpClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.normalized_base_url

    async def call_tool(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        """Invoke a tool and return its result payload.

        Args:
            tool_name: Tool name exposed by the MCP server.
            arguments: Tool arguments, already shaped (nested or flat) for the tool.

        Returns:
            The JSON-RPC ``result`` when present, otherwise the parsed body, or the
            raw text when the body was not JSON.

        Raises:
            BackendNotConfiguredError: No base URL configured; nothing is sent.
            McpTransportError: Network-level failure.
            ToolInvocationError: The server replied with a non-200 status.
        """
        if not self._config.is_configured:
            raise BackendNotConfiguredError()

        envelope = JSONRPCRequest.tools_call(tool_name, arguments)
        self._logger.info("McpToolClient.call_tool: tool=%s id=%s", tool_name, envelope.id)
        self._logger.debug("McpToolClient.call_tool: args_keys=%s", list(arguments.keys()))

        parsed = await self._transport.post_json(
            f"{self.base_url}/mcp",
            envelope.model_dump(mode="json"),
            tool_name=tool_name,
            accept=JSON_AND_SSE_ACCEPT,
        )
        self._logger.info("McpToolClient.call_tool: tool=%s status=%s", tool_name, parsed.status_code)
        return await self._interpret(tool_name, arguments, parsed)

    async def _interpret(self, tool_name: str, arguments: Dict[str, Any], parsed: ParsedResponse) -> Any:
        if parsed.status_code == 200:
            if isinstance(parsed, ParsedOk) and isinstance(parsed.body, dict) and "result" in parsed.body:
                return parsed.body["result"]
            return parsed.body

        protocol_error = as_protocol_error(parsed)
        if protocol_error is not None and protocol_error.is_invalid_request:
            self._logger.warning(
                "McpToolClient: JSON-RPC %s from %s/mcp; retrying %s via REST endpoint",
                protocol_error.code,
                self.base_url,
                tool_name,
            )
            return await self.call_tool_alternate(tool_name, arguments)

        raise ToolInvocationError(
            tool_name,
            f"MCP error: {_serialize(parsed.body)}",
            status_code=parsed.status_code,
            details=parsed.body,
        )

    async def call_tool_alternate(self, tool_name: str, arguments: Dict[str, Any]) -> Any:
        """POST the bare arguments to ``{base}/tools/{tool}/call`` (no JSON-RPC envelope)."""
        if not self._config.is_configured:
            raise BackendNotConfiguredError()

        parsed = await self._transport.post_json(
            f"{self.base_url}/tools/{tool_name}/call",
            arguments,
            tool_name=tool_name,
            accept=JSON_ACCEPT,
        )
        self._logger.info("McpToolClient.call_tool_alternate: tool=%s status=%s", tool_name, parsed.status_code)
        if parsed.status_code == 200:
            return parsed.body
        raise ToolInvocationError(
            tool_name,
            f"Alternate tool call failed: {_serialize(parsed.body)}",
            status_code=parsed.status_code,
            details=parsed.body,
        )
