from __future__ import annotations

from pydantic import Field

from .base import BaseSchema


class McpClientConfig(BaseSchema):
    base_url: str = Field(
        "",
        description=(
            "Base URL of the MCP server. The JSON-RPC endpoint is '{base_url}/mcp' and the"
            " alternate REST endpoint is '{base_url}/tools/{tool}/call'. Empty means unconfigured."
        ),
        examples=["https://estudia-mcp.fastmcp.app", "http://mock"],
        max_length=512,
    )
    request_timeout_seconds: float = Field(
        30.0,
        description="Per-request timeout in seconds for calls to the MCP server.",
        ge=0.1,
        le=600.0,
        examples=[10.0, 30.0],
    )
    user_agent: str = Field(
        "EstudIA-Lambda-Bridge",
        description="User-Agent header sent with every backend request.",
        min_length=1,
        max_length=128,
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url.strip())

    @property
    def normalized_base_url(self) -> str:
        return self.base_url.strip().rstrip("/")
