"""Logging configuration for the hlapi server.

Sets up the root handler and makes sure exceptions are logged exactly once,
by :class:`APIErrorHandler`, rather than again by uvicorn and starlette.
"""

import logging
from typing import Union

ERROR_HANDLER_LOGGER = "hlapi.api.components.error_handler"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CentralizedErrorFilter(logging.Filter):
    """Filter suppressing framework-level error logs.

    The API error handler is the authoritative source for error logging, so
    error records from uvicorn and starlette are dropped.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == ERROR_HANDLER_LOGGER:
            return True

        if record.name in ("uvicorn.error", "starlette.error") and (
            record.levelno >= logging.ERROR
        ):
            return False

        # Errors propagated to the root logger by the ASGI server
        if record.levelno >= logging.ERROR:
            message = record.getMessage()
            if "Exception in ASGI application" in message:
                return False

        return True


def configure_logging(level: Union[str, int] = "info") -> None:
    """Configure hlapi logging.

    Args:
        level: Log level name or number for the ``hlapi`` logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    logging.getLogger("hlapi").setLevel(level)

    error_filter = CentralizedErrorFilter()
    for name in ("uvicorn.error", "starlette.error"):
        framework_logger = logging.getLogger(name)
        if not any(isinstance(f, CentralizedErrorFilter) for f in framework_logger.filters):
            framework_logger.addFilter(error_filter)

    for handler in root_logger.handlers:
        if not any(isinstance(f, CentralizedErrorFilter) for f in handler.filters):
            handler.addFilter(error_filter)


__all__ = ["CentralizedErrorFilter", "configure_logging"]
