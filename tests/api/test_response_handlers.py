"""Tests for converting endpoint responses into HTTP responses."""

import io

from fastapi import FastAPI
from fastapi.testclient import TestClient

from hlapi.api.response_handlers import to_http_response
from hlapi.endpoint.models import EndpointResponse


class AsyncStream:
    """Resource with a coroutine ``read`` and only ``aclose``."""

    def __init__(self, data: bytes) -> None:
        self.buffer = io.BytesIO(data)
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        return self.buffer.read(size)

    async def aclose(self) -> None:
        self.closed = True


def serve(content, **kwargs):
    app = FastAPI()

    @app.get("/")
    async def index():
        return to_http_response(EndpointResponse(content=content, **kwargs))

    return TestClient(app)


class TestStreamedContent:
    """Test streaming resources to the client."""

    def test_sync_stream_is_sent_and_closed(self):
        stream = io.BytesIO(b"x" * 100_000)
        response = serve(stream).get("/")
        assert response.status_code == 200
        assert response.content == b"x" * 100_000
        assert response.headers["content-type"] == "application/octet-stream"
        assert stream.closed

    def test_async_stream_is_sent_and_closed(self):
        stream = AsyncStream(b"async contents")
        response = serve(stream, headers={"Content-Type": "text/plain"}).get("/")
        assert response.status_code == 200
        assert response.text == "async contents"
        assert stream.closed


class TestPlainContent:
    """Test non-stream content."""

    def test_text_and_json(self):
        assert serve("hello").get("/").text == "hello"
        assert serve({"a": 1}).get("/").json() == {"a": 1}

    def test_no_content(self):
        response = serve(None, status_code=204).get("/")
        assert response.status_code == 204
        assert response.content == b""
