"""Tests for logging configuration."""

import logging
from unittest.mock import MagicMock

from hlapi.api.components.logging_config import CentralizedErrorFilter, configure_logging


class TestCentralizedErrorFilter:
    """Test the filter keeping framework error logs out of the output."""

    def _record(self, name, level, message=""):
        record = MagicMock()
        record.name = name
        record.levelno = level
        record.getMessage.return_value = message
        return record

    def test_allows_error_handler(self):
        """Test that our error handler logs are never filtered."""
        record = self._record("hlapi.api.components.error_handler", logging.ERROR)
        assert CentralizedErrorFilter().filter(record) is True

    def test_blocks_framework_errors(self):
        error_filter = CentralizedErrorFilter()
        assert error_filter.filter(self._record("uvicorn.error", logging.ERROR)) is False
        assert error_filter.filter(self._record("starlette.error", logging.CRITICAL)) is False

    def test_allows_framework_info(self):
        record = self._record("uvicorn.error", logging.INFO, "Started server process")
        assert CentralizedErrorFilter().filter(record) is True

    def test_blocks_asgi_exception_messages(self):
        record = self._record("root", logging.ERROR, "Exception in ASGI application")
        assert CentralizedErrorFilter().filter(record) is False


class TestConfigureLogging:
    """Test configure_logging."""

    def test_sets_package_level(self):
        configure_logging("debug")
        assert logging.getLogger("hlapi").level == logging.DEBUG
        configure_logging(logging.WARNING)
        assert logging.getLogger("hlapi").level == logging.WARNING

    def test_filter_is_installed_once(self):
        configure_logging("info")
        configure_logging("info")
        uvicorn_logger = logging.getLogger("uvicorn.error")
        filters = [f for f in uvicorn_logger.filters if isinstance(f, CentralizedErrorFilter)]
        assert len(filters) == 1
