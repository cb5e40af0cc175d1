"""Tool-Call Adapter.

One public coroutine per EstudIA tool. All of them delegate to
`ToolCallAdapter.invoke`, the single validated-call routine:

1. look up the `OperationDescriptor`
2. validate and coerce the Parameter Bag (400 on failure, no network)
3. shape the tool arguments and call the MCP server
4. wrap the payload in the success envelope, or any error in a 500 envelope

`invoke` never raises; every outcome is an `OperationResult`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from estudia_bridge.mcp_client.client import McpToolClient

from .envelope import OperationResult, bad_request, failure, preview, success
from .operations import OPERATIONS, OperationDescriptor
from .validation import ValidationFailure, validate_params

LOG_PREVIEW_CHARS = 50


def _log_view(values: Mapping[str, Any]) -> Dict[str, Any]:
    view: Dict[str, Any] = {}
    for name, value in values.items():
        if value is None:
            continue
        if isinstance(value, str):
            view[name] = preview(value, LOG_PREVIEW_CHARS)
        elif isinstance(value, (list, dict)):
            view[name] = f"<{type(value).__name__} len={len(value)}>"
        else:
            view[name] = value
    return view


class ToolCallAdapter:
    """Validate, forward and wrap calls to the EstudIA MCP tools.

    Args:
        client: MCP client carrying the explicit backend configuration.
        operations: Operation table; defaults to the built-in one.
    """

    def __init__(
        self,
        client: McpToolClient,
        *,
        operations: Optional[Mapping[str, OperationDescriptor]] = None,
    ) -> None:
        self._client = client
        self._operations = operations if operations is not None else OPERATIONS
        self._logger = logging.getLogger(__name__)

    @property
    def operations(self) -> Mapping[str, OperationDescriptor]:
        return self._operations

    async def invoke(self, key: str, params: Mapping[str, Any]) -> OperationResult:
        op = self._operations.get(key)
        if op is None:
            return failure(f"Unknown operation: {key}", status_code=404)

        outcome = validate_params(op, params)
        if isinstance(outcome, ValidationFailure):
            self._logger.info("ToolCallAdapter.%s: rejected, field=%s", op.key, outcome.field)
            return bad_request(outcome.body)

        self._logger.info("ToolCallAdapter.%s: calling %s %s", op.key, op.tool_name, _log_view(outcome))
        try:
            data = await self._client.call_tool(op.tool_name, op.build_arguments(outcome))
            metadata = op.build_metadata(outcome)
        except Exception as e:
            self._logger.error("ToolCallAdapter.%s: %s failed: %s", op.key, op.tool_name, e, exc_info=True)
            return failure(str(e) or type(e).__name__, op.failure_hint)

        return success(data, metadata)

    # ------------------------------------------------------------------
    # one coroutine per tool
    # ------------------------------------------------------------------

    async def fiscal_advice(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("fiscal-advice", params)

    async def generate_embedding(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("generate-embedding", params)

    async def store_document(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("store-document", params)

    async def search_similar_documents(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("search-similar-documents", params)

    async def store_document_chunk(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("store-document-chunk", params)

    async def search_similar_chunks(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("search-chunks", params)

    async def chat_with_classroom(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("chat-classroom", params)

    async def get_classroom_info(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("classroom-info", params)

    async def create_embedding(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("create-embedding", params)

    async def professor_assistant(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("professor-assistant", params)

    async def generate_resources(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("generate-resources", params)

    async def analyze_user_context(self, params: Mapping[str, Any]) -> OperationResult:
        return await self.invoke("analyze-user-context", params)
