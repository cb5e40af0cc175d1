from __future__ import annotations

import time
from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field

from .base import BaseSchema

TOOLS_CALL_METHOD = "tools/call"

# JSON-RPC 2.0 "Invalid Request"; some deployments answer the streamable HTTP
# endpoint with it and only accept the REST-style tool endpoint.
INVALID_REQUEST_CODE = -32600


def new_call_id() -> str:
    return f"call-{int(time.time() * 1000)}"


class ToolCallParams(BaseSchema):
    name: str = Field(..., description="Tool name exposed by the MCP server.", min_length=1, max_length=128)
    arguments: Dict[str, Any] = Field(
        default_factory=dict,
        description="Tool arguments; some tools expect them nested under a 'request' key.",
    )


class JSONRPCRequest(BaseSchema):
    """JSON-RPC 2.0 request envelope used to invoke a tool."""

    jsonrpc: str = "2.0"
    id: str = Field(default_factory=new_call_id, description="Unique call identifier, 'call-<epoch ms>'.")
    method: str = TOOLS_CALL_METHOD
    params: ToolCallParams

    @classmethod
    def tools_call(cls, tool_name: str, arguments: Dict[str, Any]) -> "JSONRPCRequest":
        return cls(params=ToolCallParams(name=tool_name, arguments=arguments))


class JSONRPCError(BaseSchema):
    model_config = ConfigDict(extra="ignore")

    code: int
    message: str = ""
    data: Optional[Any] = None
