"""Tests for the default endpoint slots."""

from datetime import datetime, timezone

import pytest

from hlapi.core import hyperlambda
from hlapi.endpoint.executor import RequestExecutor
from hlapi.endpoint.models import EndpointRequest
from hlapi.endpoint.slots import create_default_registry
from hlapi.endpoint.static import MimeTypeRegistry
from hlapi.exceptions import EvaluationError


@pytest.fixture
def mime_registry():
    return MimeTypeRegistry({"css": "text/css"})


@pytest.fixture
def executor(mime_registry):
    return RequestExecutor(
        create_default_registry(), services={"mime_types": mime_registry}
    )


@pytest.fixture
def request_model():
    return EndpointRequest(
        url="modules/foo",
        headers={"X-Custom": "custom", "Accept": "text/html"},
        cookies={"session": "abc"},
        host="example.com",
        scheme="https",
    )


class TestReturnSlot:
    """Test returning values and children."""

    @pytest.mark.asyncio
    async def test_return_value(self, executor, request_model):
        script = hyperlambda.parse("return:int:42\n")
        response = await executor.execute(script, request_model)
        assert response.content == "42"

    @pytest.mark.asyncio
    async def test_return_children_accumulate(self, executor, request_model):
        script = hyperlambda.parse("return\n   a:1\nreturn\n   b:2\n")
        response = await executor.execute(script, request_model)
        assert response.content == {"a": "1", "b": "2"}


class TestResponseSlots:
    """Test slots mutating the response."""

    @pytest.mark.asyncio
    async def test_status_and_headers(self, executor, request_model):
        script = hyperlambda.parse(
            "response.status.set:int:201\n"
            "response.headers.set\n"
            "   X-Powered-By:hlapi\n"
            "   X-Count:int:3\n"
        )
        response = await executor.execute(script, request_model)
        assert response.status_code == 201
        assert response.headers == {"X-Powered-By": "hlapi", "X-Count": "3"}
        assert response.content is None

    @pytest.mark.asyncio
    async def test_cookie(self, executor, request_model):
        script = hyperlambda.parse(
            "response.cookies.set:session\n"
            "   value:xyz\n"
            "   expires:date:\"2030-01-01T00:00:00Z\"\n"
            "   http-only:true\n"
            "   same-site:strict\n"
        )
        response = await executor.execute(script, request_model)
        cookie = response.cookies[0]
        assert cookie.name == "session"
        assert cookie.value == "xyz"
        assert cookie.expires == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert cookie.http_only is True
        assert cookie.secure is False
        assert cookie.same_site == "strict"


class TestRequestSlots:
    """Test slots reading the request."""

    @pytest.mark.asyncio
    async def test_getters(self, executor, request_model):
        script = hyperlambda.parse(
            "request.headers.get:x-custom\n"
            "request.cookies.get:session\n"
            "request.url\n"
            "request.host\n"
            "request.scheme\n"
        )
        await executor.execute(script, request_model)
        assert [node.value for node in script] == [
            "custom",
            "abc",
            "modules/foo",
            "example.com",
            "https",
        ]

    @pytest.mark.asyncio
    async def test_lists(self, executor, request_model):
        script = hyperlambda.parse("request.headers.list\nrequest.cookies.list\n")
        await executor.execute(script, request_model)
        headers, cookies = script.children
        assert [(n.name, n.value) for n in headers] == [
            ("X-Custom", "custom"),
            ("Accept", "text/html"),
        ]
        assert [(n.name, n.value) for n in cookies] == [("session", "abc")]


class TestMimeSlots:
    """Test MIME type slots."""

    @pytest.mark.asyncio
    async def test_add_and_list(self, executor, request_model, mime_registry):
        script = hyperlambda.parse("mime.add:csv\n   :text/csv\nmime.list\n")
        await executor.execute(script, request_model)
        assert mime_registry.get("csv") == "text/csv"
        listing = script.first("mime.list")
        assert [(n.name, n.value) for n in listing] == [
            ("css", "text/css"),
            ("csv", "text/csv"),
        ]

    @pytest.mark.asyncio
    async def test_add_requires_type(self, executor, request_model):
        with pytest.raises(EvaluationError):
            await executor.execute(hyperlambda.parse("mime.add:csv\n"), request_model)


class TestThrowSlot:
    """Test raising errors from scripts."""

    @pytest.mark.asyncio
    async def test_throw(self, executor, request_model):
        script = hyperlambda.parse(
            "throw:Not allowed\n   status:int:403\n   public:bool:true\n   field:name\n"
        )
        with pytest.raises(EvaluationError) as exc_info:
            await executor.execute(script, request_model)
        error = exc_info.value
        assert error.message == "Not allowed"
        assert error.status_code == 403
        assert error.details == {"public": True, "field": "name"}

    @pytest.mark.asyncio
    async def test_throw_defaults(self, executor, request_model):
        with pytest.raises(EvaluationError) as exc_info:
            await executor.execute(hyperlambda.parse("throw\n"), request_model)
        assert exc_info.value.status_code == 500
        assert exc_info.value.details == {"public": False}
