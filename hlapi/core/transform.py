"""Conversions between script trees and JSON compatible structures."""

from typing import Any, Dict, List, Union

from pydantic_core import to_jsonable_python

from .node import Node

ARRAY_ITEM_NAME = "."


def json_to_node(data: Any, name: str = "") -> Node:
    """Convert a decoded JSON document into a node tree.

    Objects become named children, arrays become children named ``.`` and
    scalars become node values.

    Args:
        data: Decoded JSON value
        name: Name of the returned node

    Returns:
        Node representing the document
    """
    node = Node(name)
    if isinstance(data, dict):
        for key, value in data.items():
            node.add(json_to_node(value, str(key)))
    elif isinstance(data, list):
        for item in data:
            node.add(json_to_node(item, ARRAY_ITEM_NAME))
    else:
        node.value = data
    return node


def _is_array(node: Node) -> bool:
    return all(child.name in (ARRAY_ITEM_NAME, "") for child in node)


def node_to_json(node: Node) -> Union[Dict[str, Any], List[Any], Any]:
    """Convert a node into a JSON compatible structure.

    A node without children yields its (JSON-safe) value, a node whose
    children are all anonymous yields a list, anything else an object.
    """
    if not len(node):
        return to_jsonable_python(node.value, bytes_mode="base64", fallback=str)
    if _is_array(node):
        return [node_to_json(child) for child in node]
    return {child.name: node_to_json(child) for child in node}


__all__ = ["ARRAY_ITEM_NAME", "json_to_node", "node_to_json"]
