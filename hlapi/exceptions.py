"""Exception hierarchy for hlapi.

Every error raised by the dispatcher derives from :class:`HLAPIException`,
which carries the HTTP status code and a machine readable error code so the
API error handler can render it without inspecting the concrete type.
"""

from typing import Any, Dict, Optional


class HLAPIException(Exception):
    """Base exception for all hlapi errors.

    Attributes:
        message: Human readable error message
        status_code: HTTP status code the error maps to
        error_code: Machine readable error identifier
        details: Optional structured context
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human readable error message
            status_code: Overrides the class level status code
            error_code: Overrides the class level error code
            details: Optional structured context
        """
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    async def to_dict(self) -> Dict[str, Any]:
        """Convert the exception into a response body.

        Returns:
            Dictionary with error code, message and optional details
        """
        result: Dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# Resolution errors


class InvalidUrlError(HLAPIException):
    """Raised when a URL contains characters not legal in an endpoint path."""

    status_code = 400
    error_code = "invalid_url"

    def __init__(self, url: str, **kwargs: Any) -> None:
        super().__init__(
            f"The URL '{url}' is not a legal URL", details={"url": url}, **kwargs
        )
        self.url = url


class EndpointNotFoundError(HLAPIException):
    """Raised when no endpoint file exists for a URL and verb."""

    status_code = 404
    error_code = "not_found"


class UnauthorizedError(HLAPIException):
    """Raised when a URL points outside of the folders exposed as API."""

    status_code = 401
    error_code = "unauthorized"


# Binding errors


class UnknownArgumentError(HLAPIException):
    """Raised when an argument is not declared by the endpoint."""

    status_code = 400
    error_code = "unknown_argument"

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(
            f"I don't know how to handle the '{name}' argument",
            details={"argument": name},
            **kwargs,
        )
        self.name = name


class DuplicateArgumentError(HLAPIException):
    """Raised when the same query parameter is supplied more than once."""

    status_code = 400
    error_code = "duplicate_argument"


class ArgumentConversionError(HLAPIException):
    """Raised when a value cannot be converted to its declared type."""

    status_code = 400
    error_code = "argument_conversion"


class MultipleDeclarationsError(HLAPIException):
    """Raised when a script declares more than one [.arguments] block.

    This is an authoring defect in the endpoint file, not a caller error.
    """

    status_code = 500
    error_code = "multiple_declarations"


class UnsupportedMediaTypeError(HLAPIException):
    """Raised when a request payload has a Content-Type we cannot parse."""

    status_code = 415
    error_code = "unsupported_media_type"


# Script errors


class HyperlambdaSyntaxError(HLAPIException):
    """Raised when Hyperlambda source code cannot be parsed."""

    status_code = 400
    error_code = "syntax_error"

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        details = {"line": line} if line is not None else None
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message, details=details)
        self.line = line


class ScriptSyntaxError(HLAPIException):
    """Raised when a script file in storage cannot be parsed.

    A malformed endpoint, interceptor or code-behind file is an authoring
    defect, so it maps to a server error rather than a bad request.
    """

    status_code = 500
    error_code = "script_syntax_error"

    def __init__(self, path: str, error: HyperlambdaSyntaxError) -> None:
        details: Dict[str, Any] = {"path": path}
        if error.line is not None:
            details["line"] = error.line
        super().__init__(f"Cannot parse {path}: {error.message}", details=details)
        self.path = path
        self.line = error.line


class EvaluationError(HLAPIException):
    """Raised by the evaluator when a script cannot be executed."""

    status_code = 500
    error_code = "evaluation_error"


class ScopeError(EvaluationError):
    """Raised when a slot asks for an ambient object that is not in scope."""

    error_code = "scope_error"


# Storage errors


class StorageError(HLAPIException):
    """Base exception for capability provider failures."""

    status_code = 500
    error_code = "storage_error"


class PathTraversalError(StorageError):
    """Raised when a path escapes the storage root."""

    status_code = 400
    error_code = "path_traversal"


__all__ = [
    "HLAPIException",
    "InvalidUrlError",
    "EndpointNotFoundError",
    "UnauthorizedError",
    "UnknownArgumentError",
    "DuplicateArgumentError",
    "ArgumentConversionError",
    "MultipleDeclarationsError",
    "UnsupportedMediaTypeError",
    "HyperlambdaSyntaxError",
    "ScriptSyntaxError",
    "EvaluationError",
    "ScopeError",
    "StorageError",
    "PathTraversalError",
]
