"""Tests for script execution and content negotiation."""

import io
from unittest.mock import Mock

import pytest

from hlapi.core import hyperlambda
from hlapi.core.node import Node
from hlapi.endpoint.executor import RequestExecutor
from hlapi.endpoint.models import EndpointRequest, EndpointResponse
from hlapi.endpoint.negotiation import dispose, is_resource, to_content
from hlapi.endpoint.slots import create_default_registry
from hlapi.exceptions import EvaluationError


class TestNegotiation:
    """Test converting the result accumulator into content."""

    def test_scalar_value_is_rendered_as_text(self):
        assert to_content(EndpointResponse(), Node(value=5)) == "5"
        assert to_content(EndpointResponse(), Node(value="hello")) == "hello"

    def test_bytes_pass_through(self):
        assert to_content(EndpointResponse(), Node(value=b"\x00\x01")) == b"\x00\x01"

    def test_stream_passes_through(self):
        stream = io.BytesIO(b"data")
        assert to_content(EndpointResponse(), Node(value=stream)) is stream

    def test_children_become_json(self):
        result = hyperlambda.parse("result:hello world\ncount:int:2\n")
        assert to_content(EndpointResponse(), result) == {
            "result": "hello world",
            "count": 2,
        }

    def test_children_become_hyperlambda(self):
        response = EndpointResponse(headers={"Content-Type": "application/x-hyperlambda"})
        content = to_content(response, hyperlambda.parse("result:hello\n"))
        assert content.strip() == "result:hello"

    def test_empty_result(self):
        assert to_content(EndpointResponse(), Node()) is None

    def test_is_resource(self):
        assert is_resource(io.BytesIO())
        assert not is_resource("text")
        assert not is_resource(b"bytes")

    @pytest.mark.asyncio
    async def test_dispose_swallows_close_failures(self):
        stream = Mock(spec=["read", "close"])
        stream.close.side_effect = OSError("already closed")
        await dispose(stream)
        stream.close.assert_called_once()


class TestRequestExecutor:
    """Test evaluation inside the ambient scopes."""

    @pytest.fixture
    def registry(self):
        registry = create_default_registry()

        @registry.register("test.stream")
        def return_stream(signaler, node):
            signaler.peek("slots.result").value = node.value

        return registry

    @pytest.mark.asyncio
    async def test_return(self, registry):
        executor = RequestExecutor(registry)
        script = hyperlambda.parse("return\n   result:hello world\n")
        response = await executor.execute(script, EndpointRequest(url="modules/foo"))
        assert response.status_code == 200
        assert response.content == {"result": "hello world"}

    @pytest.mark.asyncio
    async def test_prepopulated_response(self, registry):
        executor = RequestExecutor(registry)
        response = EndpointResponse(headers={"Content-Type": "text/html"})
        script = hyperlambda.parse("return:<p>hi</p>\n")
        result = await executor.execute(script, EndpointRequest(url="x"), response)
        assert result is response
        assert result.content == "<p>hi</p>"

    @pytest.mark.asyncio
    async def test_resources_are_disposed_on_error(self, registry):
        stream = Mock(spec=["read", "close"])
        executor = RequestExecutor(registry)
        script = hyperlambda.parse("test.stream\nthrow:boom\n")
        script.first("test.stream").value = stream

        with pytest.raises(EvaluationError, match="boom"):
            await executor.execute(script, EndpointRequest(url="modules/foo"))
        stream.close.assert_called_once()

    @pytest.mark.asyncio
    async def test_services_reach_slots(self, registry):
        seen = {}

        @registry.register("test.service")
        def read_service(signaler, node):
            seen["value"] = signaler.service("thing")

        executor = RequestExecutor(registry, services={"thing": 42})
        await executor.execute(hyperlambda.parse("test.service\n"), EndpointRequest(url="x"))
        assert seen == {"value": 42}
