"""
Unit tests for the local app's global exception handler.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from estudia_bridge.server.exception_handlers import global_exception_handler, setup_exception_handlers


class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    @pytest.fixture
    def mock_request(self):
        """Create a mock request object."""
        request = Mock(spec=Request)
        request.method = "POST"
        request.url.path = "/generate-embedding"
        return request

    @pytest.mark.asyncio
    async def test_exception_handler_logs_error(self, mock_request):
        """Test that exception handler logs errors with request context."""
        with patch("estudia_bridge.server.exception_handlers.logger") as mock_logger:
            await global_exception_handler(mock_request, ValueError("Test error"))

            mock_logger.error.assert_called_once()
            call_args = mock_logger.error.call_args
            assert "Unhandled exception" in call_args[0][0]
            assert call_args[1]["extra"]["error_type"] == "ValueError"
            assert call_args[1]["extra"]["path"] == "/generate-embedding"

    @pytest.mark.asyncio
    async def test_exception_handler_returns_500_json(self, mock_request):
        """Test that exception handler returns a 500 JSON body with CORS headers."""
        with patch("estudia_bridge.server.exception_handlers.settings") as mock_settings:
            mock_settings.is_development = False
            response = await global_exception_handler(mock_request, RuntimeError("boom"))

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        content = json.loads(response.body)
        assert content["error"] == "boom"
        assert "timestamp" in content
        assert "stack" not in content
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_exception_handler_includes_stack_in_development(self, mock_request):
        """Test that development mode exposes the traceback."""
        try:
            raise KeyError("missing")
        except KeyError as exc:
            caught = exc

        with patch("estudia_bridge.server.exception_handlers.settings") as mock_settings:
            mock_settings.is_development = True
            response = await global_exception_handler(mock_request, caught)

        content = json.loads(response.body)
        assert "KeyError" in content["stack"]

    @pytest.mark.asyncio
    async def test_exception_without_message_uses_type_name(self, mock_request):
        response = await global_exception_handler(mock_request, RuntimeError())
        assert json.loads(response.body)["error"] == "RuntimeError"


def test_setup_exception_handlers_registers_handler():
    app = FastAPI()
    setup_exception_handlers(app)
    assert app.exception_handlers[Exception] is global_exception_handler
