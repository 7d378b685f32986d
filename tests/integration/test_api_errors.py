"""Error responses carry the request id and a stable shape."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from httpx import AsyncClient

from monteerly.core.exceptions import StoreError
from tests.factories import project_payload

pytestmark = [pytest.mark.integration, pytest.mark.asyncio]


async def test_request_id_is_echoed(client: AsyncClient):
    request_id = str(uuid4())

    response = await client.get("/api/v1/auth/session", headers={"X-Request-ID": request_id})

    assert response.status_code == 401
    assert response.headers["x-request-id"] == request_id
    assert response.json()["request_id"] == request_id


async def test_not_found_shape(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/projects/does-not-exist", headers=auth_headers)

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "NotFound"
    assert body["detail"] == "projects/does-not-exist not found"
    assert body["request_id"]


async def test_body_validation_is_422(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/projects", json=project_payload(budget=0), headers=auth_headers
    )

    assert response.status_code == 422


async def test_unknown_status_filter_is_422(client: AsyncClient, auth_headers):
    response = await client.get(
        "/api/v1/projects", params={"status": "archived"}, headers=auth_headers
    )

    assert response.status_code == 422


async def test_unknown_transition_target_is_a_conflict(client: AsyncClient, auth_headers):
    project = (
        await client.post("/api/v1/projects", json=project_payload(), headers=auth_headers)
    ).json()

    response = await client.post(
        f"/api/v1/projects/{project['id']}/status",
        json={"status": "in-progress"},
        headers=auth_headers,
    )

    assert response.status_code == 409


async def test_store_failure_is_503(client: AsyncClient, auth_headers):
    with patch(
        "monteerly.store.sql.SqlDocumentStore.query",
        AsyncMock(side_effect=StoreError("Could not query projects")),
    ):
        response = await client.get("/api/v1/projects", headers=auth_headers)

    assert response.status_code == 503
    assert response.json()["error"] == "StoreError"


async def test_unknown_route_keeps_request_id(client: AsyncClient):
    response = await client.get("/api/v1/nowhere")

    assert response.status_code == 404
    assert "request_id" in response.json()
