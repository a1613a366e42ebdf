"""Content negotiation: turning the result of a script into a response payload."""

import inspect
import io
import logging
from typing import Any

from hlapi.constants import ContentTypes
from hlapi.core import hyperlambda
from hlapi.core.converter import to_text
from hlapi.core.node import Node
from hlapi.core.transform import node_to_json

from .models import EndpointResponse

logger = logging.getLogger(__name__)


def is_resource(value: Any) -> bool:
    """Check if a value is an externally owned resource such as an open stream."""
    if isinstance(value, io.IOBase):
        return True
    return callable(getattr(value, "read", None)) and (
        callable(getattr(value, "close", None)) or callable(getattr(value, "aclose", None))
    )


async def dispose(resource: Any) -> None:
    """Best effort release of a resource; non-resources are ignored."""
    if not is_resource(resource):
        return
    try:
        closer = getattr(resource, "aclose", None) or resource.close
        result = closer()
        if inspect.isawaitable(result):
            await result
    except Exception as e:
        logger.warning(f"Failed to dispose {type(resource).__name__}: {e}")


def to_content(response: EndpointResponse, result: Node) -> Any:
    """Convert the result accumulator into response content.

    Priority:
        1. A resource handle or raw bytes value is passed through untouched;
           ownership of streams moves to the transport.
        2. Any other value is rendered as text.
        3. Children are converted to a JSON compatible structure, unless the
           script set the Content-Type to Hyperlambda, in which case they are
           rendered as Hyperlambda.
        4. Otherwise there is no content.

    Args:
        response: Response the script populated, consulted for its Content-Type
        result: Result accumulator

    Returns:
        Response content, or None for no content
    """
    if result.value is not None:
        if is_resource(result.value) or isinstance(result.value, (bytes, bytearray)):
            return result.value
        return to_text(result.value)

    if len(result):
        content_type = response.content_type()
        if content_type == ContentTypes.HYPERLAMBDA:
            return hyperlambda.generate(result)
        return node_to_json(result)

    return None


__all__ = ["dispose", "is_resource", "to_content"]
