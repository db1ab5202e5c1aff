"""Tests for the intake form endpoints."""

import json

import pytest

from concierge_intake.errors import StorageError

RSVP = {
    "code": "IC-1234",
    "firstName": "Ava",
    "lastName": "Stone",
    "plusOne": "no",
    "notify": "email",
    "email": "ava@example.com",
}

CONCIERGE = {
    "fullName": "Jet Rivera",
    "email": "jet@example.com",
    "typeOfRequest": "Dinner reservation",
    "partySize": "4",
}


def read_collection(settings, name):
    path = settings.data_dir / f"{name}.json"
    if not path.exists():
        return []
    return json.loads(path.read_text(encoding="utf-8"))


class TestRsvp:
    """Tests for POST /api/rsvp."""

    def test_rsvp_with_code(self, client, settings):
        response = client.post("/api/rsvp", json=RSVP)

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        rows = read_collection(settings, "rsvps")
        assert len(rows) == 1
        assert rows[0]["firstName"] == "Ava"
        assert len(rows[0]["id"]) == 32

    def test_rsvp_uses_unlocked_session_code(self, client, settings):
        client.post("/api/verify-code", json={"code": "vip456"})
        body = {k: v for k, v in RSVP.items() if k != "code"}

        response = client.post("/api/rsvp", json=body)

        assert response.json() == {"ok": True}
        assert read_collection(settings, "rsvps")[0]["code"] == "VIP456"

    def test_rsvp_invalid_code(self, client, settings):
        response = client.post("/api/rsvp", json={**RSVP, "code": "NOPE"})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "invalid-code"}
        assert read_collection(settings, "rsvps") == []

    def test_rsvp_missing_fields(self, client):
        response = client.post("/api/rsvp", json={**RSVP, "lastName": ""})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "missing-fields"}

    def test_rsvp_non_object_body(self, client):
        response = client.post(
            "/api/rsvp", content="[1, 2]", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["ok"] is False


class TestConcierge:
    """Tests for POST /api/request and /api/requests."""

    @pytest.mark.parametrize("path", ["/api/request", "/api/requests"])
    def test_request_is_stored(self, client, settings, path):
        response = client.post(path, json=CONCIERGE)

        assert response.status_code == 200
        data = response.json()
        rows = read_collection(settings, "requests")
        assert data == {"ok": True, "id": rows[0]["id"]}
        assert rows[0]["partySize"] == 4

    def test_missing_type_of_request(self, client, settings):
        response = client.post("/api/request", json={**CONCIERGE, "typeOfRequest": ""})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "missing required fields"}
        assert read_collection(settings, "requests") == []

    def test_honeypot_looks_like_validation_error(self, client, settings):
        response = client.post("/api/request", json={**CONCIERGE, "company": "Spam Inc"})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "missing required fields"}
        assert read_collection(settings, "requests") == []

    def test_invalid_email(self, client):
        response = client.post("/api/request", json={**CONCIERGE, "email": "nope"})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "invalid email"}


class TestApplications:
    """Tests for POST /api/applications."""

    def test_missing_field_is_named(self, client):
        response = client.post("/api/applications", json={"fullName": "Mara Quinn"})

        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "missing field: dob"}

    def test_application_is_stored(self, client, settings):
        body = {
            "fullName": "Mara Quinn",
            "dob": "1990-04-01",
            "email": "mara@example.com",
            "phone": "212 555 0100",
            "address": "1 Main St",
            "city": "New York",
            "state": "NY",
            "country": "USA",
            "company": "Quinn & Co",
            "industry": "Hospitality",
            "role": "Founder",
            "bio": "Hosts supper clubs.",
        }

        response = client.post("/api/applications", json=body)

        assert response.status_code == 200
        assert read_collection(settings, "applications")[0]["phone"] == "2125550100"


class TestSeatRequest:
    """Tests for POST /api/inner-circle-request."""

    def test_seat_request(self, client, settings):
        response = client.post(
            "/api/inner-circle-request",
            json={"fullName": "Lee Park", "email": "lee@example.com", "partySize": 2, "eventId": "sunset-supper"},
        )

        assert response.status_code == 200
        row = read_collection(settings, "seat_requests")[0]
        assert row["partySize"] == 2
        assert row["eventId"] == "sunset-supper"
        assert row["marketingConsent"] is False


class TestStorageFailure:
    def test_storage_error_is_generic_500(self, client, app):
        async def broken_append(collection, fields):
            raise StorageError(collection, "disk full at /var/data")

        app.state.intake.store.append = broken_append

        response = client.post("/api/request", json=CONCIERGE)

        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "internal-error"}
        assert "disk full" not in response.text
