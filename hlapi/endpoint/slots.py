"""Endpoint slot library.

Slots that let scripts interact with the HTTP request and response they are
executing on behalf of, plus a handful of dispatcher level utilities
(MIME types, endpoint reflection and mixin pages).

Every slot follows the same contract: its input is the node that invoked it,
its output is written back to that node's value or children.
"""

import logging
import re
from typing import Any, Optional

from hlapi.constants import NodeNames, Scopes
from hlapi.core.converter import convert, to_text
from hlapi.core.node import Node
from hlapi.core.transform import json_to_node
from hlapi.exceptions import EvaluationError
from hlapi.signals import Signaler, SlotRegistry

from .models import Cookie

logger = logging.getLogger(__name__)

# Slots registered by default on every dispatcher.
endpoint_slots = SlotRegistry()

_PLACEHOLDER = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")


def _child_value(node: Node, name: str, type_tag: Optional[str] = None) -> Any:
    value = node.get(name)
    if value is None or type_tag is None:
        return value
    return convert(value, type_tag)


# Result


@endpoint_slots.register(NodeNames.RETURN)
def return_slot(signaler: Signaler, node: Node) -> None:
    """Return a value, or copies of the node's children, to the caller."""
    result: Node = signaler.peek(Scopes.RESULT)
    if node.value is not None:
        result.value = node.value
    else:
        result.add_range(child.clone() for child in node)


@endpoint_slots.register("throw")
def throw_slot(signaler: Signaler, node: Node) -> None:
    """Raise an evaluation error.

    Children ``status`` (int), ``public`` (bool) and ``field`` decorate the
    error.
    """
    message = to_text(node.value) if node.value is not None else "Unhandled error"
    status = _child_value(node, "status", "int") or 500
    details = {"public": bool(_child_value(node, "public", "bool"))}
    field = node.get("field")
    if field is not None:
        details["field"] = field
    raise EvaluationError(message, status_code=status, details=details)


# Response


@endpoint_slots.register("response.status.set")
def set_status(signaler: Signaler, node: Node) -> None:
    response = signaler.peek(Scopes.RESPONSE)
    response.status_code = convert(node.value, "int")


@endpoint_slots.register("response.headers.set")
def set_headers(signaler: Signaler, node: Node) -> None:
    """Set one response header per child, the child's name being the header name."""
    response = signaler.peek(Scopes.RESPONSE)
    for child in node:
        response.headers[child.name] = to_text(child.value)


@endpoint_slots.register("response.cookies.set")
def set_cookie(signaler: Signaler, node: Node) -> None:
    """Return a cookie to the client.

    The node's value is the cookie name, children supply ``value``,
    ``expires``, ``http-only``, ``secure``, ``domain``, ``path`` and
    ``same-site``.
    """
    response = signaler.peek(Scopes.RESPONSE)
    response.cookies.append(
        Cookie(
            name=to_text(node.value),
            value=_child_value(node, "value", "string"),
            expires=_child_value(node, "expires", "date"),
            http_only=_child_value(node, "http-only", "bool") or False,
            secure=_child_value(node, "secure", "bool") or False,
            domain=_child_value(node, "domain", "string"),
            path=_child_value(node, "path", "string"),
            same_site=_child_value(node, "same-site", "string"),
        )
    )


# Request


@endpoint_slots.register("request.headers.get")
def get_header(signaler: Signaler, node: Node) -> None:
    request = signaler.peek(Scopes.REQUEST)
    node.value = request.header(to_text(node.value))


@endpoint_slots.register("request.headers.list")
def list_headers(signaler: Signaler, node: Node) -> None:
    request = signaler.peek(Scopes.REQUEST)
    node.add_range(Node(key, value) for key, value in request.headers.items())


@endpoint_slots.register("request.cookies.get")
def get_cookie(signaler: Signaler, node: Node) -> None:
    request = signaler.peek(Scopes.REQUEST)
    node.value = request.cookies.get(to_text(node.value))


@endpoint_slots.register("request.cookies.list")
def list_cookies(signaler: Signaler, node: Node) -> None:
    request = signaler.peek(Scopes.REQUEST)
    node.add_range(Node(key, value) for key, value in request.cookies.items())


@endpoint_slots.register("request.url")
def get_url(signaler: Signaler, node: Node) -> None:
    node.value = signaler.peek(Scopes.REQUEST).url


@endpoint_slots.register("request.host")
def get_host(signaler: Signaler, node: Node) -> None:
    node.value = signaler.peek(Scopes.REQUEST).host


@endpoint_slots.register("request.scheme")
def get_scheme(signaler: Signaler, node: Node) -> None:
    node.value = signaler.peek(Scopes.REQUEST).scheme


# MIME types


@endpoint_slots.register("mime.add")
def add_mime_type(signaler: Signaler, node: Node) -> None:
    """Associate the extension in the node's value with the MIME type of its first child."""
    children = node.children
    if node.value is None or not children:
        raise EvaluationError(
            "[mime.add] requires a file extension value and a MIME type child"
        )
    signaler.service("mime_types").add(to_text(node.value), to_text(children[0].value))


@endpoint_slots.register("mime.list")
def list_mime_types(signaler: Signaler, node: Node) -> None:
    for extension, mime_type in signaler.service("mime_types").list():
        node.add(Node(extension, mime_type))


# Reflection


@endpoint_slots.register("endpoints.list")
async def list_endpoints(signaler: Signaler, node: Node) -> None:
    """List every endpoint with its meta data, one ``.`` child per endpoint."""
    records = await signaler.service("reflector").list_endpoints()
    for record in records:
        node.add(json_to_node(record.model_dump(exclude_none=True), "."))


@endpoint_slots.register("endpoints.get-arguments")
async def get_arguments(signaler: Signaler, node: Node) -> None:
    """Replace the node's children with the declaration of one endpoint.

    Input children are ``url`` (relative to the storage root, the API prefix
    being optional) and ``verb``.
    """
    url = to_text(node.get("url", ""))
    verb = to_text(node.get("verb", ""))
    node.clear()
    declaration = await signaler.service("reflector").get_arguments(url, verb)
    if declaration is not None:
        node.add_range(declaration.children)


# Mixin pages


def _lookup_placeholder(node: Node, name: str) -> Optional[Node]:
    found = node.first(name)
    if found is None:
        found = node.first(f".{name}")
    if found is not None:
        return found
    arguments = node.root.first(NodeNames.ARGUMENTS)
    if arguments is not None:
        return arguments.first(name)
    return None


@endpoint_slots.register(NodeNames.MIXIN)
async def mixin(signaler: Signaler, node: Node) -> None:
    """Render an HTML page, returning it as the result of the request.

    The node's value is the path of the HTML file. Its children are
    evaluated first, after which every ``{{name}}`` placeholder in the page
    is replaced with the value of the child called ``name`` (or ``.name``),
    falling back to the bound arguments. Unknown placeholders are left as is.
    """
    storage = signaler.service("storage")
    html = await storage.read_async(to_text(node.value))
    await signaler.eval(node)

    def substitute(match: "re.Match[str]") -> str:
        found = _lookup_placeholder(node, match.group(1))
        if found is None:
            return match.group(0)
        return "" if found.value is None else to_text(found.value)

    signaler.peek(Scopes.RESULT).value = _PLACEHOLDER.sub(substitute, html)


def create_default_registry() -> SlotRegistry:
    """Return a fresh registry holding every endpoint slot."""
    return endpoint_slots.copy()


__all__ = ["create_default_registry", "endpoint_slots"]
