"""Tests for the API error handler."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from pydantic import BaseModel, ValidationError

from hlapi.api.components.error_handler import APIErrorHandler
from hlapi.exceptions import EvaluationError, UnknownArgumentError


@pytest.fixture
def request_mock():
    request = MagicMock()
    request.url.path = "/magic/modules/foo"
    request.method = "GET"
    return request


def body(response):
    return json.loads(response.body)


class TestAPIErrorHandler:
    """Test rendering exceptions as JSON error responses."""

    @pytest.mark.asyncio
    async def test_client_error(self, request_mock):
        """Test that a client error keeps its status and details."""
        response = await APIErrorHandler.handle_exception(
            request_mock, UnknownArgumentError("foo")
        )
        assert response.status_code == 400
        data = body(response)
        assert data["error_code"] == "unknown_argument"
        assert data["details"] == {"argument": "foo"}
        assert data["path"] == "/magic/modules/foo"
        assert "timestamp" in data

    @pytest.mark.asyncio
    async def test_server_error_is_logged(self, request_mock, caplog):
        """Test that server errors are logged with their traceback."""
        with caplog.at_level("ERROR", logger="hlapi.api.components.error_handler"):
            response = await APIErrorHandler.handle_exception(
                request_mock, EvaluationError("boom", status_code=503)
            )
        assert response.status_code == 503
        assert any("boom" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_http_exception(self, request_mock):
        response = await APIErrorHandler.handle_exception(
            request_mock, HTTPException(status_code=405, detail="Method not allowed")
        )
        assert response.status_code == 405
        assert body(response)["error_code"] == "method_not_allowed"

    @pytest.mark.asyncio
    async def test_validation_error(self, request_mock):
        class Model(BaseModel):
            count: int

        with pytest.raises(ValidationError) as exc_info:
            Model(count="many")

        response = await APIErrorHandler.handle_exception(request_mock, exc_info.value)
        assert response.status_code == 422
        data = body(response)
        assert data["error_code"] == "validation_error"
        assert data["details"]["errors"][0]["field"] == "count"

    @pytest.mark.asyncio
    async def test_unexpected_error_hides_details(self, request_mock):
        """Test that unexpected errors never leak their message."""
        response = await APIErrorHandler.handle_exception(
            request_mock, RuntimeError("database password is hunter2")
        )
        assert response.status_code == 500
        data = body(response)
        assert data["error_code"] == "internal_error"
        assert "hunter2" not in data["message"]

    def test_create_error_response_without_request(self):
        response = APIErrorHandler.create_error_response("not_found", "Missing", 404)
        data = body(response)
        assert response.status_code == 404
        assert "path" not in data
        assert "details" not in data
