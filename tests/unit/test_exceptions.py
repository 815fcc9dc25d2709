"""Tests for custom exception classes and the error envelope."""

import json

import pytest
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request

from chatbot_service.core.exceptions import (
    AIProviderError,
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    app_exception_handler,
    error_body,
    validation_exception_handler,
)


def _request(path: str = "/api/test") -> Request:
    return Request({"type": "http", "method": "GET", "path": path, "headers": []})


class TestExceptions:
    """Verify exception status codes and codes."""

    def test_app_exception_defaults(self) -> None:
        exc = AppException(message="err", code="ERR")
        assert exc.status_code == 400
        assert exc.code == "ERR"

    def test_validation_error(self) -> None:
        exc = ValidationError("bad")
        assert exc.status_code == 400
        assert exc.code == "ValidationError"

    def test_unauthorized_error(self) -> None:
        assert UnauthorizedError().status_code == 401

    def test_forbidden_error(self) -> None:
        exc = ForbiddenError()
        assert exc.status_code == 403
        assert exc.code == "Forbidden"

    def test_not_found_error_message(self) -> None:
        exc = NotFoundError("Conversation")
        assert exc.status_code == 404
        assert exc.message == "Conversation not found"

    def test_conflict_error(self) -> None:
        assert ConflictError("taken").status_code == 409

    def test_ai_provider_error_keeps_detail(self) -> None:
        exc = AIProviderError("Try again", detail="Rate limit exceeded")
        assert exc.status_code == 500
        assert exc.message == "Try again"
        assert exc.detail == "Rate limit exceeded"


class TestErrorEnvelope:
    def test_error_body_shape(self) -> None:
        body = error_body("NotFoundError", "Conversation not found")
        assert body["success"] is False
        assert body["error"] == "NotFoundError"
        assert body["message"] == "Conversation not found"
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_app_exception_handler(self) -> None:
        response = await app_exception_handler(_request(), NotFoundError("Conversation"))
        assert response.status_code == 404
        body = json.loads(response.body)
        assert body["error"] == "NotFoundError"
        assert body["success"] is False

    @pytest.mark.asyncio
    async def test_validation_handler_returns_400(self) -> None:
        exc = RequestValidationError(
            [{"loc": ("body", "patientId"), "msg": "Field required", "type": "missing"}]
        )
        response = await validation_exception_handler(_request(), exc)
        assert response.status_code == 400
        body = json.loads(response.body)
        assert body["error"] == "ValidationError"
        assert body["message"] == "patientId: Field required"
