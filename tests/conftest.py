"""
Pytest configuration and fixtures for the ESM Map Tasks tests.

Fixtures:
  - test_settings:  Settings pointing at the fake Entu API with a test key
  - fake_entu:      FakeEntu loaded with a task, its map and the user's responses
  - entu_client:    Open EntuClient backed by fake_entu
  - locations / responses: normalized sample collections
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from factories import (
    API_KEY,
    LOC_A,
    LOC_B,
    LOC_C,
    FakeEntu,
    default_entities,
)

from esm.entu.client import EntuClient
from esm.models import Coordinates, Location, Response
from esm.settings import Settings, clear_settings_cache


@pytest.fixture(scope="function")
def test_settings() -> Settings:
    clear_settings_cache()
    return Settings(
        env="local",
        entu_url="https://entu.test",
        entu_account="esmuuseum",
        entu_key=API_KEY,
        entu_token="",
        debug=True,
    )


@pytest.fixture(scope="function")
def fake_entu() -> FakeEntu:
    return FakeEntu(default_entities())


@pytest_asyncio.fixture(scope="function")
async def entu_client(
    fake_entu: FakeEntu, test_settings: Settings
) -> AsyncGenerator[EntuClient, None]:
    async with EntuClient.from_settings(test_settings, transport=fake_entu.transport) as client:
        yield client


@pytest.fixture
def locations() -> list[Location]:
    return [
        Location(id=LOC_A, coordinates=Coordinates(lat=59.4370, lng=24.7450), name="Raekoja plats"),
        Location(id=LOC_B, coordinates=Coordinates(lat=59.4389, lng=24.7468), name="Paks Margareeta"),
        Location(id=LOC_C, coordinates=Coordinates(lat=59.4351, lng=24.7398)),
    ]


@pytest.fixture
def responses() -> list[Response]:
    return [
        Response(id="r1", location_id=LOC_A),
        Response(id="r2", location_id=LOC_A),
        Response(id="r3", location_id=LOC_B),
    ]
