"""
Tests for CLI commands.

Entu access goes through make_client, which is patched to return a client
backed by the fake Entu API.
"""

import json
from unittest.mock import patch

import pytest
from factories import LOC_A, LOC_NO_LONG, MAP_ID, TASK_ID, FakeEntu, location_entity
from typer.testing import CliRunner

from esm.cli.main import app
from esm.entu.client import EntuClient

runner = CliRunner()


@pytest.fixture
def fake_client(test_settings, fake_entu: FakeEntu):
    def make_client(token=None):
        return EntuClient.from_settings(test_settings, token=token, transport=fake_entu.transport)

    with patch("esm.cli.main.make_client", side_effect=make_client) as mock:
        yield mock


class TestLocations:
    def test_lists_locations(self, fake_client):
        result = runner.invoke(app, ["locations", MAP_ID])

        assert result.exit_code == 0
        assert "Raekoja plats" in result.output
        assert "3 location(s)" in result.output
        assert "Katkine" not in result.output

    def test_empty_map(self, fake_client):
        result = runner.invoke(app, ["locations", "68691ed21749f351b9c82f7f"])

        assert result.exit_code == 0
        assert "No locations found." in result.output

    def test_invalid_id_fails(self, fake_client):
        result = runner.invoke(app, ["locations", "kaart"])

        assert result.exit_code == 1
        assert "Invalid map id" in result.output

    def test_token_option_is_passed(self, fake_client):
        runner.invoke(app, ["locations", MAP_ID, "--token", "jwt-test"])
        fake_client.assert_called_once_with("jwt-test")


class TestProgress:
    def test_shows_progress(self, fake_client):
        result = runner.invoke(app, ["progress", TASK_ID])

        assert result.exit_code == 0
        assert f"Task: Vanalinna matk ({TASK_ID})" in result.output
        assert "Visited 2/3 locations (67%)" in result.output
        assert "Expected responses: 2/3 (67%)" in result.output

    def test_unknown_selection(self, fake_client):
        result = runner.invoke(app, ["progress", TASK_ID, "--selected", LOC_NO_LONG])

        assert result.exit_code == 0
        assert f"Location {LOC_NO_LONG} is not on this task's map" in result.output

    def test_missing_task(self, fake_client):
        result = runner.invoke(app, ["progress", "686917231749f351b9c82fff"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_upstream_failure(self, fake_client, fake_entu):
        fake_entu.fail_with = 503

        result = runner.invoke(app, ["progress", TASK_ID])

        assert result.exit_code == 1
        assert "Entu API error: 503" in result.output

    def test_non_json_reply(self, fake_client, fake_entu):
        fake_entu.html_body = "<html>maintenance</html>"

        result = runner.invoke(app, ["progress", TASK_ID])

        assert result.exit_code == 1
        assert "Invalid JSON from Entu API" in result.output


class TestNormalize:
    def test_reports_valid_and_rejected(self, tmp_path):
        dump = tmp_path / "locations.json"
        dump.write_text(
            json.dumps(
                {
                    "entities": [
                        location_entity(LOC_A, name="Raekoja plats"),
                        location_entity(LOC_NO_LONG, lng=None),
                        "not an entity",
                    ],
                    "count": 3,
                }
            ),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["normalize", str(dump)])

        assert result.exit_code == 0
        assert "Valid: 1" in result.output
        assert "Rejected: 1" in result.output
        assert f"{LOC_NO_LONG}: missing or invalid coordinates" in result.output

    def test_accepts_plain_list(self, tmp_path):
        dump = tmp_path / "locations.json"
        dump.write_text(json.dumps([location_entity(LOC_A)]), encoding="utf-8")

        result = runner.invoke(app, ["normalize", str(dump)])

        assert "Valid: 1" in result.output
        assert "Rejected: 0" in result.output

    def test_invalid_json(self, tmp_path):
        dump = tmp_path / "broken.json"
        dump.write_text("{not json", encoding="utf-8")

        result = runner.invoke(app, ["normalize", str(dump)])

        assert result.exit_code == 1
        assert "Could not read" in result.output

    def test_wrong_shape(self, tmp_path):
        dump = tmp_path / "scalar.json"
        dump.write_text(json.dumps({"entities": 5}), encoding="utf-8")

        result = runner.invoke(app, ["normalize", str(dump)])

        assert result.exit_code == 1
