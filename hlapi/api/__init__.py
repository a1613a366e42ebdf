"""HTTP surface for hlapi.

This module provides:
- FastAPI application factory routing requests to the dispatcher
- Request payload and response handlers
- Centralized error handling and logging configuration
"""

from .components import APIErrorHandler, configure_logging
from .request_handlers import build_endpoint_request, register_request_handler
from .response_handlers import to_http_response
from .server import EndpointServer, create_app

__all__ = [
    "APIErrorHandler",
    "EndpointServer",
    "build_endpoint_request",
    "configure_logging",
    "create_app",
    "register_request_handler",
    "to_http_response",
]
