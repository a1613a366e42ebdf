"""Endpoint pipeline: resolution, interceptors, binding, execution and negotiation."""

from .arguments import ArgumentBinder, detach_declaration
from .executor import RequestExecutor
from .interceptors import InterceptorComposer, apply_interceptor
from .models import Cookie, EndpointRequest, EndpointResponse
from .negotiation import to_content
from .resolver import EndpointResolver, is_legal_segment, is_legal_url
from .slots import create_default_registry, endpoint_slots
from .static import MimeTypeRegistry, StaticFileServer, mime_types

__all__ = [
    "ArgumentBinder",
    "Cookie",
    "EndpointRequest",
    "EndpointResolver",
    "EndpointResponse",
    "InterceptorComposer",
    "MimeTypeRegistry",
    "RequestExecutor",
    "StaticFileServer",
    "apply_interceptor",
    "create_default_registry",
    "detach_declaration",
    "endpoint_slots",
    "is_legal_segment",
    "is_legal_url",
    "mime_types",
    "to_content",
]
