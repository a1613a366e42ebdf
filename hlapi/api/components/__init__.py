"""Reusable components of the hlapi HTTP surface."""

from .error_handler import APIErrorHandler
from .logging_config import CentralizedErrorFilter, configure_logging

__all__ = ["APIErrorHandler", "CentralizedErrorFilter", "configure_logging"]
