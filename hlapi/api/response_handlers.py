"""Response handlers: the dispatcher's response model to an HTTP response."""

import inspect
import logging
from typing import Any, AsyncIterator, Callable, Dict, Iterator

from fastapi.responses import JSONResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from hlapi.constants import ContentTypes
from hlapi.endpoint.models import EndpointResponse
from hlapi.endpoint.negotiation import is_resource

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _headers(response: EndpointResponse) -> Dict[str, str]:
    return {key: value for key, value in response.headers.items()}


def _stream_chunks(stream: Any) -> Iterator[bytes]:
    while True:
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


async def _astream_chunks(stream: Any) -> AsyncIterator[bytes]:
    while True:
        chunk = await stream.read(CHUNK_SIZE)
        if not chunk:
            return
        yield chunk


def _closer(stream: Any) -> Callable[[], Any]:
    aclose = getattr(stream, "aclose", None)
    return aclose if callable(aclose) else stream.close


def _set_cookies(http_response: Response, response: EndpointResponse) -> None:
    for cookie in response.cookies:
        http_response.set_cookie(
            key=cookie.name,
            value=cookie.value or "",
            expires=cookie.expires,
            path=cookie.path or "/",
            domain=cookie.domain,
            secure=cookie.secure,
            httponly=cookie.http_only,
            samesite=cookie.same_site.lower() if cookie.same_site else None,
        )


def to_http_response(response: EndpointResponse) -> Response:
    """Convert an endpoint response into a FastAPI response.

    Streams are handed to the transport and closed once fully sent. Streams
    with a coroutine ``read`` are consumed asynchronously.

    Args:
        response: Response produced by the dispatcher

    Returns:
        FastAPI response carrying status, headers, cookies and content
    """
    content = response.content
    headers = _headers(response)
    content_type = response.content_type()

    http_response: Response
    if content is None:
        http_response = Response(status_code=response.status_code, headers=headers)
    elif is_resource(content):
        if inspect.iscoroutinefunction(content.read):
            chunks = _astream_chunks(content)
        else:
            chunks = _stream_chunks(content)
        http_response = StreamingResponse(
            chunks,
            status_code=response.status_code,
            headers=headers,
            media_type=content_type or ContentTypes.OCTET_STREAM,
            background=BackgroundTask(_closer(content)),
        )
    elif isinstance(content, (bytes, bytearray)):
        http_response = Response(
            content=bytes(content),
            status_code=response.status_code,
            headers=headers,
            media_type=content_type or ContentTypes.OCTET_STREAM,
        )
    elif isinstance(content, str):
        http_response = Response(
            content=content,
            status_code=response.status_code,
            headers=headers,
            media_type=content_type or "text/plain",
        )
    else:
        http_response = JSONResponse(
            content=content, status_code=response.status_code, headers=headers
        )

    _set_cookies(http_response, response)
    return http_response


__all__ = ["to_http_response"]
