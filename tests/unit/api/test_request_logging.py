"""Request logging middleware tests."""

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from src.api.core.middleware.logging import client_address


def make_request(headers: dict[str, str], client=("10.0.0.5", 4321)) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/v1/institutions",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
            "client": client,
        }
    )


def test_client_address_prefers_first_forwarded_hop():
    request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

    assert client_address(request) == "203.0.113.7"


def test_client_address_falls_back_to_peer():
    assert client_address(make_request({})) == "10.0.0.5"
    assert client_address(make_request({}, client=None)) is None


@pytest.mark.asyncio
async def test_supplied_request_id_is_echoed(app, client: AsyncClient):
    response = await client.get(
        "/v1/institutions", headers={"X-Request-ID": "req-123"}
    )

    assert response.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_health_checks_carry_no_request_id(app, client: AsyncClient):
    response = await client.get("/health/liveness")

    assert "X-Request-ID" not in response.headers
