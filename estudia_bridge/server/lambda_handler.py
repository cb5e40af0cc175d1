"""
AWS Lambda Entry Point.

Configure the function handler as ``estudia_bridge.server.lambda_handler.handler``.
Each invocation builds its own dispatcher and HTTP client and runs the
dispatch coroutine to completion; nothing is shared between invocations
except the settings read at cold start.
"""

import asyncio
from typing import Any, Dict

from estudia_bridge.core.logging_config import get_logger, setup_logging
from estudia_bridge.server.deps import build_dispatcher

setup_logging()
logger = get_logger(__name__)


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda proxy handler.

    Args:
        event: API Gateway (REST or HTTP API) proxy event, or a plain parameter
            dict for direct invocations.
        context: Lambda context object (unused apart from logging).

    Returns:
        Lambda proxy response: ``{statusCode, headers, body}``.
    """
    request_id = getattr(context, "aws_request_id", None)
    logger.debug(f"Lambda invocation request_id={request_id} event_keys={sorted((event or {}).keys())}")
    return asyncio.run(build_dispatcher().dispatch(event or {}))
