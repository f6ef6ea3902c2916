"""
HTTP contract tests for the incident API.

Uses FastAPI's TestClient against an in-memory SQLite store.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from api.main import create_app
from core.clock import MockClock
from core.config import Settings
from database.engine import create_all_tables, create_database_engine, create_session_factory
from incidents.repository import SqlIncidentStore
from incidents.store import IncidentStore


T0 = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"


# =============================================================
# FIXTURES
# =============================================================

@pytest.fixture
def clock():
    return MockClock(T0)


@pytest.fixture
def client(clock):
    engine = create_database_engine("sqlite://")
    create_all_tables(engine)
    store = SqlIncidentStore(create_session_factory(engine), clock=clock)
    app = create_app(settings=Settings(), store=store, clock=clock)
    with TestClient(app) as test_client:
        yield test_client
    engine.dispose()


@pytest.fixture
def failing_store():
    return MagicMock(spec=IncidentStore)


@pytest.fixture
def failing_client(failing_store, clock):
    app = create_app(settings=Settings(), store=failing_store, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


def _create(client, **fields):
    payload = {"title": "API outage", "status": "investigating"}
    payload.update(fields)
    response = client.post("/incidents", json=payload)
    assert response.status_code == 200
    return response.text


# =============================================================
# TEST: Incidents
# =============================================================

class TestIncidentEndpoints:
    """Test incident CRUD over HTTP."""

    def test_create_returns_plain_id(self, client):
        response = client.post("/incidents", json={"title": "API outage"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert len(response.text) == 36

    def test_get_incident(self, client):
        incident_id = _create(client, description="Elevated error rates")

        response = client.get(f"/incidents/{incident_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == incident_id
        assert body["title"] == "API outage"
        assert body["description"] == "Elevated error rates"
        assert body["status"] == "investigating"
        assert body["created_at"] == "2024-01-15T10:00:00Z"
        assert body["updates"] == []

    def test_create_ignores_client_id(self, client):
        incident_id = _create(client, id="chosen-by-client")
        assert incident_id != "chosen-by-client"

    @pytest.mark.parametrize("body", [b"", b"{", b"not json", b"[]"])
    def test_create_malformed_body(self, client, body):
        response = client.post("/incidents", content=body)
        assert response.status_code == 400
        assert response.text == "Bad Request"

    def test_create_overlong_title(self, client):
        response = client.post("/incidents", json={"title": "x" * 256})
        assert response.status_code == 400
        assert response.text == "Bad Request"

    def test_edit_overlong_title(self, client):
        incident_id = _create(client)

        response = client.patch(f"/incidents/{incident_id}", json={"title": "x" * 256})

        assert response.status_code == 400
        assert client.get(f"/incidents/{incident_id}").json()["title"] == "API outage"

    def test_create_unknown_status(self, client):
        response = client.post("/incidents", json={"title": "x", "status": "down"})
        assert response.status_code == 400

    def test_get_malformed_id(self, client):
        response = client.get("/incidents/abc")
        assert response.status_code == 400
        assert response.text == "Bad Request"

    def test_get_unknown_id(self, client):
        response = client.get(f"/incidents/{UNKNOWN_ID}")
        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_edit_incident(self, client, clock):
        incident_id = _create(client)
        clock.advance(minutes=5)

        response = client.patch(f"/incidents/{incident_id}", json={"status": "identified"})

        assert response.status_code == 200
        assert response.content == b""
        body = client.get(f"/incidents/{incident_id}").json()
        assert body["status"] == "identified"
        assert body["title"] == "API outage"
        assert body["updated_at"] == "2024-01-15T10:05:00Z"

    def test_edit_malformed_patch(self, client):
        incident_id = _create(client)
        response = client.patch(f"/incidents/{incident_id}", content=b"status=resolved")
        assert response.status_code == 400

    def test_edit_unknown_incident(self, client):
        response = client.patch(f"/incidents/{UNKNOWN_ID}", json={"title": "x"})
        assert response.status_code == 404

    def test_delete_incident(self, client):
        incident_id = _create(client)

        assert client.delete(f"/incidents/{incident_id}").status_code == 200
        assert client.get(f"/incidents/{incident_id}").status_code == 404
        assert client.delete(f"/incidents/{incident_id}").status_code == 404


# =============================================================
# TEST: Listings
# =============================================================

class TestListingEndpoints:
    """Test list-before and active listings."""

    def test_list_defaults_to_now(self, client, clock):
        first = _create(client, title="first")
        clock.advance(minutes=1)
        second = _create(client, title="second")
        clock.advance(minutes=1)

        response = client.get("/incidents")

        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [second, first]

    def test_list_before_timestamp(self, client, clock):
        first = _create(client, title="first")
        clock.advance(minutes=1)
        _create(client, title="second")
        clock.advance(minutes=1)

        response = client.get("/incidents", params={"before": "2024-01-15T10:00:30Z"})
        assert [i["id"] for i in response.json()] == [first]

        response = client.get("/incidents", params={"before": "2024-01-15T11:00:30+01:00"})
        assert [i["id"] for i in response.json()] == [first]

    def test_list_before_is_strict(self, client, clock):
        _create(client)
        response = client.get("/incidents", params={"before": "2024-01-15T10:00:00Z"})
        assert response.json() == []

    @pytest.mark.parametrize("before", [
        "yesterday",
        "2024-01-15",
        "2024-01-15T10:00:00",
        "2024-01-15T10:00:00Z\n",
    ])
    def test_list_bad_before(self, client, before):
        response = client.get("/incidents", params={"before": before})
        assert response.status_code == 400
        assert response.text == "Bad Request"

    def test_list_before_far_future(self, client):
        incident_id = _create(client)

        response = client.get("/incidents", params={"before": "9999-12-31T23:59:59-01:00"})

        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [incident_id]

    def test_list_before_distant_past(self, client):
        _create(client)

        response = client.get("/incidents", params={"before": "0001-01-01T00:00:00+01:00"})

        assert response.status_code == 200
        assert response.json() == []

    def test_list_empty(self, client):
        response = client.get("/incidents")
        assert response.status_code == 200
        assert response.json() == []

    def test_active(self, client, clock):
        open_id = _create(client)
        clock.advance(seconds=1)
        _create(client, status="resolved")

        response = client.get("/incidents/active")

        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [open_id]


# =============================================================
# TEST: Updates
# =============================================================

class TestUpdateEndpoints:
    """Test update endpoints."""

    def test_add_and_get_update(self, client, clock):
        incident_id = _create(client)
        clock.advance(minutes=1)

        response = client.post(
            f"/incidents/{incident_id}/updates",
            json={"text": "Fix deployed", "incident_id": UNKNOWN_ID},
        )
        assert response.status_code == 200
        update_id = response.text

        body = client.get(f"/updates/{update_id}").json()
        assert body == {
            "id": update_id,
            "incident_id": incident_id,
            "text": "Fix deployed",
            "created_at": "2024-01-15T10:01:00Z",
        }

        incident = client.get(f"/incidents/{incident_id}").json()
        assert [u["id"] for u in incident["updates"]] == [update_id]

    def test_add_update_unknown_incident(self, client):
        response = client.post(f"/incidents/{UNKNOWN_ID}/updates", json={"text": "hi"})
        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_add_update_malformed(self, client):
        incident_id = _create(client)
        response = client.post(f"/incidents/{incident_id}/updates", content=b"hi")
        assert response.status_code == 400

    def test_add_update_blank_text(self, client):
        incident_id = _create(client)
        response = client.post(f"/incidents/{incident_id}/updates", json={"text": ""})
        assert response.status_code == 400

    def test_edit_update_takes_raw_body(self, client):
        incident_id = _create(client)
        update_id = client.post(f"/incidents/{incident_id}/updates", json={"text": "old"}).text

        response = client.patch(f"/updates/{update_id}", content="hello")

        assert response.status_code == 200
        assert client.get(f"/updates/{update_id}").json()["text"] == "hello"

    def test_edit_update_json_body_is_literal(self, client):
        incident_id = _create(client)
        update_id = client.post(f"/incidents/{incident_id}/updates", json={"text": "old"}).text

        client.patch(f"/updates/{update_id}", content='{"text": "new"}')

        assert client.get(f"/updates/{update_id}").json()["text"] == '{"text": "new"}'

    def test_edit_update_invalid_utf8(self, client):
        incident_id = _create(client)
        update_id = client.post(f"/incidents/{incident_id}/updates", json={"text": "old"}).text

        response = client.patch(f"/updates/{update_id}", content=b"\xff\xfe")
        assert response.status_code == 400

    def test_get_unknown_update(self, client):
        response = client.get(f"/updates/{UNKNOWN_ID}")
        assert response.status_code == 404

    def test_delete_update(self, client):
        incident_id = _create(client)
        update_id = client.post(f"/incidents/{incident_id}/updates", json={"text": "hi"}).text

        response = client.delete(f"/incidents/{incident_id}/updates/{update_id}")

        assert response.status_code == 200
        assert client.get(f"/updates/{update_id}").status_code == 404

    def test_delete_update_wrong_incident(self, client):
        owner = _create(client, title="owner")
        other = _create(client, title="other")
        update_id = client.post(f"/incidents/{owner}/updates", json={"text": "hi"}).text

        response = client.delete(f"/incidents/{other}/updates/{update_id}")

        assert response.status_code == 404
        assert client.get(f"/updates/{update_id}").status_code == 200

    def test_delete_incident_removes_updates(self, client):
        incident_id = _create(client)
        update_id = client.post(f"/incidents/{incident_id}/updates", json={"text": "hi"}).text

        client.delete(f"/incidents/{incident_id}")

        assert client.get(f"/updates/{update_id}").status_code == 404


# =============================================================
# TEST: Internal Failures
# =============================================================

class TestInternalFailures:
    """Test unexpected store failures surface as 500."""

    def test_store_exception(self, failing_client, failing_store):
        failing_store.get_incident.side_effect = RuntimeError("disk on fire")

        response = failing_client.get(f"/incidents/{UNKNOWN_ID}")

        assert response.status_code == 500
        assert response.text == "Internal Server Error"

    def test_listing_failure(self, failing_client, failing_store):
        failing_store.get_active_incidents.side_effect = ConnectionError("refused")

        response = failing_client.get("/incidents/active")

        assert response.status_code == 500


# =============================================================
# TEST: Health / Wiring
# =============================================================

class TestHealth:
    """Test health endpoint and default store wiring."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"
        assert body["uptime_seconds"] >= 0

    def test_store_built_from_settings(self, clock):
        app = create_app(settings=Settings(database_url="sqlite://"), clock=clock)

        with TestClient(app) as test_client:
            created = test_client.post("/incidents", json={"title": "API outage"})
            assert created.status_code == 200
            assert test_client.get(f"/incidents/{created.text}").status_code == 200
