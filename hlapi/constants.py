"""Constants for the hlapi dispatcher.

This module provides centralized constants for HTTP verbs, reserved node
names, ambient scope names, content types and other magic strings used
throughout the package.
"""


class HTTPVerbs:
    """HTTP verbs an endpoint file may be declared for."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    PATCH = "patch"

    ALL = (GET, PUT, POST, DELETE, PATCH)
    MUTATING = (PUT, POST, PATCH)


class NodeNames:
    """Reserved node names with meaning to the dispatcher."""

    ARGUMENTS = ".arguments"
    DESCRIPTION = ".description"
    TYPE = ".type"
    ACCEPT = ".accept"
    FOREIGN_KEYS = ".foreign-keys"
    INTERCEPTOR = ".interceptor"
    AUTH = "auth.ticket.verify"
    VALIDATORS_PREFIX = "validators."
    MIXIN = "io.file.mixin"
    RETURN = "return"


class Scopes:
    """Names of the ambient objects published to evaluated scripts."""

    REQUEST = "http.request"
    RESPONSE = "http.response"
    RESULT = "slots.result"


class ContentTypes:
    """Content types the dispatcher negotiates."""

    JSON = "application/json"
    HYPERLAMBDA = "application/x-hyperlambda"
    HTML = "text/html"
    OCTET_STREAM = "application/octet-stream"
    FORM_URLENCODED = "application/x-www-form-urlencoded"
    MULTIPART = "multipart/form-data"


class Files:
    """File naming conventions."""

    SCRIPT_SUFFIX = ".hl"
    INTERCEPTOR = "interceptor.hl"
    INDEX_PAGE = "index.html"
    DEFAULT_PAGE = "default.html"
    HTML_SUFFIX = ".html"


class LogIcons:
    """Emoji icons for consistent logging."""

    START = "🚀"
    STOP = "🛑"
    SUCCESS = "✅"
    ERROR = "❌"
    WARNING = "⚠️"
    STORAGE = "📁"
    DISCOVERY = "🔍"
    CONFIG = "🔧"
    DYNAMIC = "🔄"
    WORLD = "🌐"
