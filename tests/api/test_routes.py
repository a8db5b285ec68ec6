"""
Tests for the HTTP API.

The app is built with get_app() and its Entu dependency is overridden with a
client backed by the fake Entu API.
"""

from collections.abc import AsyncGenerator
from unittest.mock import patch

import httpx
import pytest
import pytest_asyncio
from factories import JWT, LOC_A, LOC_B, LOC_C, MAP_ID, TASK_ID, FakeEntu
from fastapi import Request

from esm.api.app import get_app
from esm.api.auth import extract_bearer_token, get_entu_client
from esm.entu.client import EntuClient
from esm.settings import Settings, get_settings


@pytest_asyncio.fixture(scope="function")
async def client(
    test_settings: Settings, fake_entu: FakeEntu
) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def entu_client_override(request: Request) -> AsyncGenerator[EntuClient, None]:
        token = extract_bearer_token(request)
        async with EntuClient.from_settings(
            test_settings, token=token, transport=fake_entu.transport
        ) as entu:
            yield entu

    with patch("esm.api.app.get_settings", return_value=test_settings):
        app = get_app()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_entu_client] = entu_client_override

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.mark.asyncio
class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
class TestLocations:
    async def test_list_locations(self, client):
        resp = await client.get(f"/api/v1/locations/{MAP_ID}")

        assert resp.status_code == 200
        data = resp.json()
        assert data["map_id"] == MAP_ID
        assert data["count"] == 3
        assert [loc["id"] for loc in data["locations"]] == [LOC_A, LOC_B, LOC_C]
        assert data["locations"][0]["coordinates"] == {"lat": 59.437, "lng": 24.745}

    async def test_invalid_map_id(self, client):
        resp = await client.get("/api/v1/locations/kaart-1")
        assert resp.status_code == 400

    async def test_upstream_failure(self, client, fake_entu):
        fake_entu.fail_with = 500

        resp = await client.get(f"/api/v1/locations/{MAP_ID}")

        assert resp.status_code == 502

    async def test_non_json_reply_is_bad_gateway(self, client, fake_entu):
        fake_entu.html_body = "<html>maintenance</html>"

        resp = await client.get(f"/api/v1/locations/{MAP_ID}")

        assert resp.status_code == 502

    async def test_bearer_token_is_forwarded(self, client, fake_entu):
        resp = await client.get(
            f"/api/v1/locations/{MAP_ID}", headers={"Authorization": f"Bearer {JWT}"}
        )

        assert resp.status_code == 200
        assert "/api/auth" not in [r.url.path for r in fake_entu.requests]
        assert fake_entu.requests[0].headers["Authorization"] == f"Bearer {JWT}"


@pytest.mark.asyncio
class TestProgress:
    async def test_progress(self, client):
        resp = await client.get(f"/api/v1/tasks/{TASK_ID}/progress")

        assert resp.status_code == 200
        data = resp.json()
        assert data["visited_ids"] == sorted([LOC_A, LOC_B])
        assert data["visited_count"] == 2
        assert data["total_count"] == 3
        assert data["percent"] == pytest.approx(66.667, abs=0.001)
        assert data["rounded_percent"] == 67
        assert data["stats"] == {"actual": 2, "expected": 3, "percent": 67}

    async def test_unknown_task(self, client):
        resp = await client.get("/api/v1/tasks/686917231749f351b9c82fff/progress")
        assert resp.status_code == 404

    async def test_invalid_user_id(self, client):
        resp = await client.get(f"/api/v1/tasks/{TASK_ID}/progress", params={"user_id": "me"})
        assert resp.status_code == 400


@pytest.mark.asyncio
class TestMarkers:
    async def test_markers_with_selection(self, client):
        resp = await client.get(f"/api/v1/tasks/{TASK_ID}/markers", params={"selected": LOC_B})

        assert resp.status_code == 200
        data = resp.json()
        assert data["selected_id"] == LOC_B
        icons = {m["location"]["id"]: m["icon"] for m in data["markers"]}
        assert icons == {LOC_A: "visited", LOC_B: "selected", LOC_C: "default"}
        assert data["progress"]["visited_count"] == 2

    async def test_unknown_selection_selects_nothing(self, client):
        resp = await client.get(
            f"/api/v1/tasks/{TASK_ID}/markers", params={"selected": "68691f001749f351b9c82fff"}
        )

        data = resp.json()
        assert data["selected_id"] is None
        assert not any(m["is_selected"] for m in data["markers"])


@pytest.mark.asyncio
async def test_workspace_snapshot(client):
    resp = await client.get(f"/api/v1/tasks/{TASK_ID}/workspace")

    assert resp.status_code == 200
    data = resp.json()
    assert data["task"]["name"] == "Vanalinna matk"
    assert len(data["locations"]) == 3
    assert len(data["responses"]) == 4
    assert sorted(data["progress"]["visited_ids"]) == sorted([LOC_A, LOC_B])
