"""Core script tree primitives for hlapi."""

from . import hyperlambda
from .converter import convert, to_text, type_name
from .hyperlambda import Expression
from .node import Node
from .transform import json_to_node, node_to_json

__all__ = [
    "Node",
    "Expression",
    "hyperlambda",
    "convert",
    "to_text",
    "type_name",
    "json_to_node",
    "node_to_json",
]
