"""Default classifier chain for endpoint reflection.

A classifier is a plain function receiving the parsed endpoint script, its
verb and its input descriptors, and returning the fields it contributes to
the endpoint's meta-data record (an empty dict when it has nothing to add).
"""

from typing import Any, Callable, Dict, List, Optional

from hlapi.constants import ContentTypes, HTTPVerbs, NodeNames
from hlapi.core.node import Node

from .models import InputDescriptor

Classifier = Callable[[Node, str, List[InputDescriptor]], Dict[str, Any]]

CRUD_PREFIX = "crud-"


def _declared_type(script: Node) -> Optional[str]:
    value = script.get(NodeNames.TYPE)
    return value if isinstance(value, str) else None


def endpoint_type(script: Node, verb: str, inputs: List[InputDescriptor]) -> Dict[str, Any]:
    """Classify the endpoint by its ``[.type]`` node."""
    declared = _declared_type(script)
    return {"type": declared} if declared else {}


def _read_columns(script: Node) -> List[Node]:
    # [xxx.connect]/[xxx.read]/[columns]
    for connect in script:
        if not connect.name.endswith(".connect"):
            continue
        for read in connect:
            if not read.name.endswith(".read"):
                continue
            columns = read.first("columns")
            return columns.children if columns is not None else []
    return []


def crud_get(script: Node, verb: str, inputs: List[InputDescriptor]) -> Dict[str, Any]:
    """Describe what CRUD read and count endpoints return."""
    declared = _declared_type(script)
    if verb != HTTPVerbs.GET or not declared:
        return {}

    if declared == f"{CRUD_PREFIX}count":
        return {"returns": {"count": "long"}, "array": False}

    if declared == f"{CRUD_PREFIX}read":
        # Column types are found from the [.arguments]/[<column>.eq] filters.
        types = {descriptor.name: descriptor.type for descriptor in inputs}
        returns = {
            column.name: types.get(f"{column.name}.eq") for column in _read_columns(script)
        }
        return {"returns": returns, "array": True}

    return {}


def _response_content_type(script: Node) -> Optional[str]:
    for node in script.descendants():
        if node.name != "response.headers.set":
            continue
        for header in node:
            if header.name.lower() == "content-type" and isinstance(header.value, str):
                return header.value
    return None


def produces(script: Node, verb: str, inputs: List[InputDescriptor]) -> Dict[str, Any]:
    """Content type the endpoint returns, defaulting to JSON."""
    return {"produces": _response_content_type(script) or ContentTypes.JSON}


def consumes(script: Node, verb: str, inputs: List[InputDescriptor]) -> Dict[str, Any]:
    """Content type the endpoint accepts as payload.

    Only endpoints taking a payload have one; ``[.accept]`` overrides the
    JSON default.
    """
    accept = script.get(NodeNames.ACCEPT)
    if isinstance(accept, str) and accept:
        return {"consumes": accept}
    if verb in HTTPVerbs.MUTATING:
        return {"consumes": ContentTypes.JSON}
    return {}


DEFAULT_CLASSIFIERS: List[Classifier] = [endpoint_type, crud_get, produces, consumes]


__all__ = [
    "Classifier",
    "DEFAULT_CLASSIFIERS",
    "consumes",
    "crud_get",
    "endpoint_type",
    "produces",
]
