# tests/test_core/test_exceptions.py

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from glacier.core.exception_handlers import http_exception_handler
from glacier.core.exceptions import (
    AppException,
    BadRequestException,
    InternalFaultException,
    ResourceNotFoundException,
    ServiceUnavailableException,
    UnauthorizedException,
)


@pytest.mark.parametrize(
    "exc_cls,status,message",
    [
        (BadRequestException, 400, "Bad request"),
        (UnauthorizedException, 401, "Unauthorized"),
        (ResourceNotFoundException, 404, "Not found"),
        (InternalFaultException, 500, "Internal server error"),
        (ServiceUnavailableException, 503, "Service unavailable"),
    ],
)
def test_defaults(exc_cls, status, message):
    exc = exc_cls()
    assert exc.status_code == status
    assert exc.detail == exc.message == message


def test_custom_message_and_headers():
    exc = BadRequestException('"id" must be a number', headers={"X-Reason": "id"})
    assert exc.detail == '"id" must be a number'
    assert exc.headers == {"X-Reason": "id"}


def test_problem_body_carries_only_standard_members():
    app = FastAPI()
    app.add_exception_handler(AppException, http_exception_handler)

    @app.get("/boom")
    async def boom(request: Request):
        raise ServiceUnavailableException("Glacier storage is not configured")

    resp = TestClient(app).get("/boom?authorisation=secret-token")

    assert resp.status_code == 503
    body = resp.json()
    assert set(body) == {"type", "title", "detail", "status", "instance"}
    assert body["detail"] == "Glacier storage is not configured"
    assert body["instance"] == "/boom"
    assert not hasattr(ServiceUnavailableException(), "details")
