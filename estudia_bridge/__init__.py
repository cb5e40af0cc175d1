"""EstudIA MCP Bridge.

A serverless HTTP-to-MCP bridge: API Gateway requests are routed to one of the
EstudIA tools exposed by a remote MCP server, called over JSON-RPC
(``tools/call``), and answered with a uniform JSON envelope.

Subpackages
-----------

- ``estudia_bridge.server``: Lambda handler, request dispatcher, and a FastAPI
  app for local runs.
- ``estudia_bridge.bridge``: the Tool-Call Adapter. A declarative operation
  table drives validation, argument shaping and response envelopes.
- ``estudia_bridge.mcp_client``: JSON-RPC envelope, httpx transport with SSE
  parsing, and the ``-32600`` REST fallback.
- ``estudia_bridge.core``: settings and logging.
"""
