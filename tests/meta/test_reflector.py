"""Tests for endpoint reflection."""

import pytest

from hlapi.core import hyperlambda
from hlapi.endpoint.executor import RequestExecutor
from hlapi.endpoint.models import EndpointRequest
from hlapi.endpoint.slots import create_default_registry
from hlapi.exceptions import EndpointNotFoundError
from hlapi.meta import EndpointReflector, ForeignKeyLookup
from hlapi.meta.reflector import get_auth, parse_endpoint_filename
from hlapi.storage import LocalScriptStorage

FILES = {
    "modules/interceptor.hl": ".interceptor\n",
    "modules/readme.md": "# not an endpoint",
    "modules/foo.options.hl": "",
    "modules/broken.get.hl": "return\n  result:x\n",
    "modules/foo.get.hl": "return\n   result:hello world\n",
    "modules/crud.get.hl": (
        ".type:crud-read\n"
        ".arguments\n"
        "   id.eq:long\n"
        "   name.eq:string\n"
        "data.connect:db\n"
        "   data.read\n"
        "      table:users\n"
        "      columns\n"
        "         id\n"
        "         name\n"
    ),
    "modules/echo.post.hl": (
        ".description:Echoes its input\n"
        ".arguments\n"
        "   name:string\n"
        "   role_id:int\n"
        ".foreign-keys\n"
        "   .\n"
        "      column:role_id\n"
        "      table:roles\n"
        "      foreign_column:id\n"
        "      foreign_name:name\n"
        "auth.ticket.verify:admin, root\n"
        "response.headers.set\n"
        "   Content-Type:application/x-hyperlambda\n"
    ),
    "modules/sub/count.get.hl": ".type:crud-count\nauth.ticket.verify\n",
}


@pytest.fixture
def reflector(root_dir, write_files):
    write_files(FILES)
    return EndpointReflector(LocalScriptStorage(root_dir=str(root_dir)))


def by_path(records):
    return {(record.path, record.verb): record for record in records}


class TestHelpers:
    """Test the reflection helpers."""

    def test_parse_endpoint_filename(self):
        assert parse_endpoint_filename("foo.get.hl") == ("foo", "get")
        assert parse_endpoint_filename("interceptor.hl") is None
        assert parse_endpoint_filename("foo.options.hl") is None
        assert parse_endpoint_filename("a.b.get.hl") is None
        assert parse_endpoint_filename("foo.get.txt") is None

    def test_get_auth(self):
        assert get_auth(hyperlambda.parse("body\n")) is None
        assert get_auth(hyperlambda.parse("auth.ticket.verify\n")) == ["*"]
        assert get_auth(hyperlambda.parse("auth.ticket.verify:a,b\n")) == ["a", "b"]


class TestEndpointReflector:
    """Test listing and describing endpoints."""

    @pytest.mark.asyncio
    async def test_listing_order_and_filtering(self, reflector):
        records = await reflector.list_endpoints()
        assert [(record.path, record.verb) for record in records] == [
            ("magic/modules/broken", "get"),
            ("magic/modules/crud", "get"),
            ("magic/modules/echo", "post"),
            ("magic/modules/foo", "get"),
            ("magic/modules/sub/count", "get"),
        ]

    @pytest.mark.asyncio
    async def test_broken_file_yields_error_record(self, reflector):
        records = by_path(await reflector.list_endpoints())
        broken = records[("magic/modules/broken", "get")]
        assert broken.error
        assert broken.input is None

    @pytest.mark.asyncio
    async def test_plain_endpoint(self, reflector):
        foo = by_path(await reflector.list_endpoints())[("magic/modules/foo", "get")]
        assert foo.input is None
        assert foo.auth is None
        assert foo.produces == "application/json"
        assert foo.consumes is None
        assert foo.error is None

    @pytest.mark.asyncio
    async def test_post_endpoint(self, reflector):
        echo = by_path(await reflector.list_endpoints())[("magic/modules/echo", "post")]
        assert echo.description == "Echoes its input"
        assert echo.auth == ["admin", "root"]
        assert echo.consumes == "application/json"
        assert echo.produces == "application/x-hyperlambda"
        assert [(i.name, i.type) for i in echo.input] == [
            ("name", "string"),
            ("role_id", "int"),
        ]
        assert echo.input[0].lookup is None
        assert echo.input[1].lookup == ForeignKeyLookup(table="roles", key="id", name="name")

    @pytest.mark.asyncio
    async def test_crud_endpoints(self, reflector):
        records = by_path(await reflector.list_endpoints())
        read = records[("magic/modules/crud", "get")]
        assert read.type == "crud-read"
        assert read.returns == {"id": "long", "name": "string"}
        assert read.array is True

        count = records[("magic/modules/sub/count", "get")]
        assert count.returns == {"count": "long"}
        assert count.array is False
        assert count.auth == ["*"]

    @pytest.mark.asyncio
    async def test_register_classifier(self, reflector):
        @reflector.register_classifier
        def tagged(script, verb, inputs):
            return {"tags": [verb]}

        foo = by_path(await reflector.list_endpoints())[("magic/modules/foo", "get")]
        assert foo.tags == ["get"]

    @pytest.mark.asyncio
    async def test_get_arguments(self, reflector):
        declaration = await reflector.get_arguments("magic/modules/echo", "post")
        assert [child.name for child in declaration] == ["name", "role_id"]
        assert await reflector.get_arguments("modules/foo", "get") is None
        with pytest.raises(EndpointNotFoundError):
            await reflector.get_arguments("modules/missing", "get")


class TestReflectionSlots:
    """Test the slots exposing reflection to scripts."""

    @pytest.mark.asyncio
    async def test_endpoints_list(self, reflector):
        executor = RequestExecutor(
            create_default_registry(), services={"reflector": reflector}
        )
        script = hyperlambda.parse("endpoints.list\n")
        await executor.execute(script, EndpointRequest(url="x"))
        listing = script.first("endpoints.list")
        assert len(listing) == 5
        assert {child.get("path") for child in listing} >= {"magic/modules/foo"}

    @pytest.mark.asyncio
    async def test_endpoints_get_arguments(self, reflector):
        executor = RequestExecutor(
            create_default_registry(), services={"reflector": reflector}
        )
        script = hyperlambda.parse(
            "endpoints.get-arguments\n   url:modules/echo\n   verb:post\n"
        )
        await executor.execute(script, EndpointRequest(url="x"))
        node = script.first("endpoints.get-arguments")
        assert [(child.name, child.value) for child in node] == [
            ("name", "string"),
            ("role_id", "int"),
        ]
