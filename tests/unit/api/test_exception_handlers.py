"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from api.exception_handlers import setup_exception_handlers
from core.exceptions import EventNotStoredError, InvalidEventError


def _create_test_app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_invalid_event_returns_400_with_field(self) -> None:
        app = _create_test_app()

        @app.get("/raise-app")
        async def _() -> None:
            raise InvalidEventError("missing assignees", field="metadata.assigned_to")

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/raise-app")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "INVALID_EVENT"
        assert body["message"] == "missing assignees"
        assert body["details"] == {"field": "metadata.assigned_to"}

    @pytest.mark.asyncio
    async def test_server_side_app_exception_keeps_status(self) -> None:
        app = _create_test_app()

        @app.get("/raise-store")
        async def _() -> None:
            raise EventNotStoredError("TASK_ASSIGNED")

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/raise-store")

        assert response.status_code == 500
        assert response.json()["error_code"] == "DATABASE_ERROR"

    @pytest.mark.asyncio
    async def test_http_exception_returns_standard_format(self) -> None:
        from starlette.exceptions import HTTPException

        app = _create_test_app()

        @app.get("/raise-http")
        async def _() -> None:
            raise HTTPException(status_code=403, detail="Forbidden")

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.get("/raise-http")

        assert response.status_code == 403
        body = response.json()
        assert body["error_code"] == "HTTP_ERROR"
        assert body["message"] == "Forbidden"

    @pytest.mark.asyncio
    async def test_validation_error_returns_field_details(self) -> None:
        from pydantic import BaseModel, Field

        app = _create_test_app()

        class Body(BaseModel):
            tenant_id: str = Field(..., min_length=1)

        @app.post("/validate")
        async def _(body: Body) -> dict[str, bool]:
            return {"ok": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/validate", json={"tenant_id": ""})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["details"][0]["field"] == "body.tenant_id"

    @pytest.mark.asyncio
    async def test_unhandled_exception_returns_500(self) -> None:
        app = _create_test_app()

        mock_request = MagicMock()
        mock_request.state.request_id = "test-req-id"

        handler = app.exception_handlers.get(Exception)
        assert handler is not None, "Global exception handler not registered"

        response = await handler(mock_request, RuntimeError("Something went wrong"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"]["request_id"] == "test-req-id"
