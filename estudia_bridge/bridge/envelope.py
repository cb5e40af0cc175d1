"""Uniform response envelopes returned by every bridge operation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SOURCE_TAG = "mcp_server"


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2025-01-31T12:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def preview(text: Any, limit: int = 100) -> str:
    s = str(text)
    return s[:limit] + ("..." if len(s) > limit else "")


@dataclass
class OperationResult:
    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


def success(data: Any, metadata: Optional[Dict[str, Any]] = None) -> OperationResult:
    body: Dict[str, Any] = {
        "success": True,
        "data": data,
        "source": SOURCE_TAG,
        "timestamp": utc_timestamp(),
    }
    if metadata:
        body["metadata"] = metadata
    return OperationResult(200, body)


def failure(message: str, hint: Optional[str] = None, *, status_code: int = 500) -> OperationResult:
    body: Dict[str, Any] = {"error": message, "timestamp": utc_timestamp()}
    if hint:
        body["hint"] = hint
    return OperationResult(status_code, body)


def bad_request(body: Dict[str, Any]) -> OperationResult:
    return OperationResult(400, {**body, "timestamp": utc_timestamp()})
