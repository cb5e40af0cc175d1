"""
Configuration Settings.

This module defines the bridge configuration using Pydantic's BaseSettings.
Values are bound from environment variables (Lambda configuration) and an
optional .env file for local development.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from estudia_bridge.mcp_client.schemas.config import McpClientConfig


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # MCP backend
    # =====================================================================
    mcp_server_url: str = Field(
        default="",
        description="Base URL of the MCP server that exposes the EstudIA tools",
        alias="MCP_SERVER_URL",
    )
    mcp_request_timeout: float = Field(
        default=30.0,
        ge=0.1,
        le=600.0,
        description="Timeout in seconds for each outbound call to the MCP server",
        alias="MCP_REQUEST_TIMEOUT",
    )

    # =====================================================================
    # Service
    # =====================================================================
    environment: str = Field(
        default="production",
        description="Deployment environment; 'development' exposes stack traces in error bodies",
        alias="ESTUDIA_BRIDGE_ENVIRONMENT",
    )
    service_name: str = Field(
        default="EstudIA Lambda - MCP Bridge",
        description="Service name reported by the health and info endpoints",
        alias="ESTUDIA_BRIDGE_SERVICE_NAME",
    )
    version: str = Field(
        default="3.0.0",
        description="Service version reported by the health and info endpoints",
        alias="ESTUDIA_BRIDGE_VERSION",
    )

    # =====================================================================
    # Logging
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="ESTUDIA_BRIDGE_LOG_LEVEL",
    )
    log_format: str = Field(
        default="detailed",
        description="Log line format (simple, detailed, json)",
        alias="LOG_FORMAT",
    )
    enable_file_logging: bool = Field(
        default=False,
        description="Write logs to ./logs as well; leave off on Lambda",
        alias="ENABLE_FILE_LOGGING",
    )

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def mcp_client(self) -> McpClientConfig:
        """Build the explicit MCP client configuration injected into the bridge."""
        return McpClientConfig(base_url=self.mcp_server_url, request_timeout_seconds=self.mcp_request_timeout)


settings = Settings()
