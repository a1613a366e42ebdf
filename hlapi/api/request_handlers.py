"""Request payload handlers.

Turn the body of an inbound HTTP request into the structured payload tree
endpoint scripts receive as arguments, depending on its Content-Type.
Handlers are looked up by MIME type and can be replaced or extended at
startup with :func:`register_request_handler`.
"""

import json
import logging
from typing import Awaitable, Callable, Dict, Optional

from fastapi import Request
from starlette.datastructures import UploadFile

from hlapi.constants import ContentTypes
from hlapi.core.node import Node
from hlapi.core.transform import json_to_node
from hlapi.endpoint.models import EndpointRequest
from hlapi.exceptions import (
    ArgumentConversionError,
    DuplicateArgumentError,
    UnsupportedMediaTypeError,
)

logger = logging.getLogger(__name__)

RequestHandler = Callable[[Request], Awaitable[Node]]

_request_handlers: Dict[str, RequestHandler] = {}


def _media_type(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower()


def _charset(request: Request) -> str:
    content_type = request.headers.get("content-type", "")
    for parameter in content_type.split(";")[1:]:
        key, _, value = parameter.partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return "utf-8"


def register_request_handler(content_type: str, handler: RequestHandler) -> None:
    """Register the payload handler for a MIME type, replacing any existing one."""
    _request_handlers[content_type.lower()] = handler


def get_request_handler(content_type: str) -> Optional[RequestHandler]:
    return _request_handlers.get(content_type.lower())


async def json_handler(request: Request) -> Node:
    """Decode a JSON body into a node tree."""
    body = await request.body()
    try:
        data = json.loads(body.decode(_charset(request)))
    except (UnicodeDecodeError, LookupError, json.JSONDecodeError) as e:
        raise ArgumentConversionError(f"Request body is not valid JSON: {e}") from e
    return json_to_node(data)


async def form_handler(request: Request) -> Node:
    """Read URL encoded or multipart form data.

    Uploaded files are not read into memory; each becomes a ``[file]`` node
    with ``[name]`` and ``[stream]`` children.
    """
    form = await request.form()
    args = Node()
    files = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            files.append(value)
        else:
            args.add(Node(key, value))
    for upload in files:
        args.add(
            Node("file", children=[Node("name", upload.filename), Node("stream", upload.file)])
        )
    return args


async def hyperlambda_handler(request: Request) -> Node:
    """Pass a Hyperlambda body on as a raw ``[body]`` argument."""
    body = await request.body()
    try:
        text = body.decode(_charset(request))
    except (UnicodeDecodeError, LookupError) as e:
        raise ArgumentConversionError(f"Request body could not be decoded: {e}") from e
    return Node(children=[Node("body", text)])


register_request_handler(ContentTypes.JSON, json_handler)
register_request_handler(ContentTypes.FORM_URLENCODED, form_handler)
register_request_handler(ContentTypes.MULTIPART, form_handler)
register_request_handler(ContentTypes.HYPERLAMBDA, hyperlambda_handler)


async def read_payload(request: Request) -> Optional[Node]:
    """Read the payload of a request.

    Returns:
        The payload tree, or None if the request has no body

    Raises:
        UnsupportedMediaTypeError: If no handler exists for the Content-Type
    """
    body = await request.body()
    if not body:
        return None

    media_type = _media_type(request)
    handler = get_request_handler(media_type)
    if handler is None:
        raise UnsupportedMediaTypeError(
            f"I don't know how to handle the '{media_type}' Content-Type",
            details={"content_type": media_type},
        )
    return await handler(request)


def read_query(request: Request) -> Dict[str, str]:
    """Read the query parameters of a request.

    Raises:
        DuplicateArgumentError: If a parameter is supplied more than once
    """
    query: Dict[str, str] = {}
    for key, value in request.query_params.multi_items():
        if key in query:
            raise DuplicateArgumentError(
                f"Found same argument '{key}' twice in URL of request",
                details={"argument": key},
            )
        query[key] = value
    return query


async def build_endpoint_request(request: Request, url: str) -> EndpointRequest:
    """Translate a FastAPI request into the dispatcher's request model.

    Args:
        request: Inbound FastAPI request
        url: Request path without the leading slash

    Returns:
        Immutable request for one dispatch
    """
    return EndpointRequest(
        url=url,
        verb=request.method.lower(),
        query=read_query(request),
        headers=dict(request.headers),
        cookies=dict(request.cookies),
        host=request.headers.get("host") or request.url.hostname,
        scheme=request.url.scheme,
        payload=await read_payload(request),
    )


__all__ = [
    "RequestHandler",
    "build_endpoint_request",
    "form_handler",
    "get_request_handler",
    "hyperlambda_handler",
    "json_handler",
    "read_payload",
    "read_query",
    "register_request_handler",
]
