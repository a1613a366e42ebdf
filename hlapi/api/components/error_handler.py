"""Centralized error handling for the hlapi HTTP surface.

Turns exceptions escaping the dispatcher into uniform JSON error bodies:
``{error_code, message, details?, timestamp, path}``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from hlapi.exceptions import HLAPIException

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    415: "unsupported_media_type",
    422: "validation_error",
    500: "internal_error",
}


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class APIErrorHandler:
    """Error handler registered on the FastAPI application."""

    @staticmethod
    async def handle_exception(request: Request, exc: Exception) -> JSONResponse:
        """Render an exception as a JSON error response.

        Args:
            request: FastAPI request object
            exc: Exception that occurred

        Returns:
            JSONResponse with error details
        """
        if isinstance(exc, HLAPIException):
            # Client errors are expected, only server errors get a stack trace
            if exc.status_code >= 500:
                logger.error(
                    f"API Error [{exc.error_code}]: {exc.message}",
                    exc_info=exc,
                    extra={
                        "error_code": exc.error_code,
                        "status_code": exc.status_code,
                        "path": request.url.path,
                        "method": request.method,
                        "details": exc.details,
                    },
                )
            else:
                logger.debug(
                    f"API Error [{exc.error_code}]: {exc.message}",
                    extra={
                        "error_code": exc.error_code,
                        "status_code": exc.status_code,
                        "path": request.url.path,
                        "method": request.method,
                    },
                )

            response_data = await exc.to_dict()
            response_data["timestamp"] = _timestamp()
            response_data["path"] = request.url.path
            return JSONResponse(status_code=exc.status_code, content=response_data)

        if isinstance(exc, ValidationError):
            logger.debug(f"Validation error: {exc}")
            error_details = [
                {
                    "field": " -> ".join(str(loc) for loc in err.get("loc", [])),
                    "type": err.get("type", "validation_error"),
                    "message": err.get("msg", "Validation failed"),
                }
                for err in exc.errors()
            ]
            message = "Validation failed"
            if error_details:
                message += ": " + "; ".join(
                    f"{e['field']}: {e['message']}" for e in error_details
                )
            return APIErrorHandler.create_error_response(
                "validation_error", message, 422, {"errors": error_details}, request
            )

        if isinstance(exc, HTTPException):
            error_code = _HTTP_ERROR_CODES.get(exc.status_code, "internal_error")
            message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
            if exc.status_code >= 500:
                logger.error(f"HTTP Error [{exc.status_code}]: {message}", exc_info=exc)
            else:
                logger.debug(f"HTTP Error [{exc.status_code}]: {message}")
            return APIErrorHandler.create_error_response(
                error_code, message, exc.status_code, request=request
            )

        logger.error(
            f"Unexpected error: {type(exc).__name__}: {exc}",
            exc_info=exc,
            extra={
                "error_type": type(exc).__name__,
                "path": request.url.path,
                "method": request.method,
            },
        )
        return APIErrorHandler.create_error_response(
            "internal_error",
            "An unexpected error occurred. Please contact support if this persists.",
            500,
            request=request,
        )

    @staticmethod
    def create_error_response(
        error_code: str,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None,
    ) -> JSONResponse:
        """Create a standardized error response.

        Args:
            error_code: Error code identifier
            message: Error message
            status_code: HTTP status code
            details: Additional error details
            request: Optional request object for context

        Returns:
            JSONResponse with error details
        """
        response_data: Dict[str, Any] = {
            "error_code": error_code,
            "message": message,
            "timestamp": _timestamp(),
        }
        if details:
            response_data["details"] = details
        if request is not None:
            response_data["path"] = request.url.path
        return JSONResponse(status_code=status_code, content=response_data)


__all__ = ["APIErrorHandler"]
