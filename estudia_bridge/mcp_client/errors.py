"""Error types raised by the MCP client layer.

Usage:
- Catch `McpClientError` for any failure talking to the MCP server.
- `ToolInvocationError` exposes the HTTP status code and the backend body for
  diagnosis.
"""

from __future__ import annotations

from typing import Any, Optional


class McpClientError(Exception):
    pass


class BackendNotConfiguredError(McpClientError):
    def __init__(self) -> None:
        super().__init__("MCP_SERVER_URL is not configured")


class McpTransportError(McpClientError):
    """Network-level failure (connection refused, DNS, timeout) while calling a tool."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"Error connecting to MCP server: {message}")
        self.tool_name = tool_name


class ToolInvocationError(McpClientError):
    """The MCP server answered, but not with a usable result.

    Args:
        tool_name: The tool that was invoked.
        message: Human-readable error description.
        status_code: HTTP status code returned by the backend.
        details: Parsed (or raw) backend body.
    """

    def __init__(
        self,
        tool_name: str,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.tool_name = tool_name
        self.status_code = status_code
        self.details = details
