from .config import McpClientConfig
from .core import JSONRPCError, JSONRPCRequest, ToolCallParams

__all__ = ["JSONRPCError", "JSONRPCRequest", "McpClientConfig", "ToolCallParams"]
