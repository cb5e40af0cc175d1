"""
Core utilities and configuration for the EstudIA MCP bridge.

This package provides logging configuration and the settings model shared by
the Lambda handler and the local development server.
"""

from estudia_bridge.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
