"""Tests for node and JSON conversions."""

from hlapi.core.node import Node
from hlapi.core.transform import json_to_node, node_to_json


class TestJsonToNode:
    """Test decoding JSON documents into trees."""

    def test_object(self):
        node = json_to_node({"name": "Jane", "age": 42})
        assert node.get("name") == "Jane"
        assert node.get("age") == 42

    def test_array_items_are_anonymous(self):
        node = json_to_node({"tags": ["a", "b"]})
        tags = node.first("tags")
        assert [(n.name, n.value) for n in tags] == [(".", "a"), (".", "b")]


class TestNodeToJson:
    """Test converting trees to JSON compatible structures."""

    def test_object(self):
        node = Node(children=[Node("result", "hello world")])
        assert node_to_json(node) == {"result": "hello world"}

    def test_array(self):
        node = Node(children=[Node(".", 1), Node(".", 2)])
        assert node_to_json(node) == [1, 2]

    def test_nested_document(self):
        document = {"user": {"name": "Jane", "roles": ["admin", "user"]}}
        assert node_to_json(json_to_node(document)) == document

    def test_bytes_become_base64(self):
        node = Node(children=[Node("data", b"hi")])
        assert node_to_json(node) == {"data": "aGk="}
