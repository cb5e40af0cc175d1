"""Transport layer for MCP client communication.

The bridge talks to the MCP server with single request/response exchanges.
Responses may be plain JSON or a single Server-Sent Events frame; `http.py`
reads the whole body and turns it into a typed parse outcome
(`ParsedOk` / `ParsedRaw`) so the client can interpret it without nested
content-type checks.
"""

from .http import HttpToolTransport, ParsedOk, ParsedRaw, ParsedResponse, extract_sse_data, loads_strict, parse_response

__all__ = [
    "HttpToolTransport",
    "ParsedOk",
    "ParsedRaw",
    "ParsedResponse",
    "extract_sse_data",
    "loads_strict",
    "parse_response",
]
