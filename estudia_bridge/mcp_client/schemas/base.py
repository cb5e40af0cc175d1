"""Pydantic base schema utilities for MCP client models.

Provides a common `BaseSchema` that enforces the extra-field policy and name
population for models under `estudia_bridge.mcp_client.schemas`.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Shared base for all Pydantic models in mcp_client.

    - Sets strict handling for extra fields
    - Enables populate_by_name so aliases and field names both work
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )
