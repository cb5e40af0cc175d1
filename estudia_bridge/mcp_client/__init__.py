from .client import McpToolClient, ProtocolError
from .errors import BackendNotConfiguredError, McpClientError, McpTransportError, ToolInvocationError
from .schemas.config import McpClientConfig

__all__ = [
    "BackendNotConfiguredError",
    "McpClientConfig",
    "McpClientError",
    "McpToolClient",
    "McpTransportError",
    "ProtocolError",
    "ToolInvocationError",
]
