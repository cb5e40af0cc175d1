"""
Dispatcher Dependency.

Builds the `RequestDispatcher` from explicit settings. Used by the Lambda
handler directly and by the local FastAPI app through `DispatcherDep`.
"""

from typing import Annotated, Optional

import httpx
from fastapi import Depends

from estudia_bridge.bridge.adapter import ToolCallAdapter
from estudia_bridge.core.config import Settings, settings
from estudia_bridge.mcp_client.client import McpToolClient
from estudia_bridge.server.dispatcher import RequestDispatcher


def build_dispatcher(
    app_settings: Optional[Settings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> RequestDispatcher:
    """
    Wire client, adapter and dispatcher together.

    Args:
        app_settings: Settings to use; defaults to the process-wide settings.
        client: Optional shared AsyncClient (tests inject a MockTransport client).

    Returns:
        A ready-to-use RequestDispatcher.
    """
    s = app_settings or settings
    mcp = McpToolClient(s.mcp_client, client=client)
    return RequestDispatcher(ToolCallAdapter(mcp), settings=s)


def get_dispatcher() -> RequestDispatcher:
    return build_dispatcher()


DispatcherDep = Annotated[RequestDispatcher, Depends(get_dispatcher)]
