"""Tests for the intake orchestrator."""

import pytest

from concierge_intake.errors import StorageError
from concierge_intake.services.gate_session import GateContext, GateState
from concierge_intake.services.intake_service import IntakeService
from concierge_intake.services.intake_validator import SubmissionType
from concierge_intake.services.notifier import NotificationQueue


class RecordingNotifier:
    def __init__(self):
        self.records = []

    async def notify(self, record):
        self.records.append(record)


@pytest.fixture
def notifications():
    return NotificationQueue(RecordingNotifier(), maxsize=10)


@pytest.fixture
def service(validator, json_store, notifications):
    return IntakeService(validator, json_store, notifications)


class TestSubmitRsvp:
    """Tests for RSVP submissions."""

    async def test_rsvp_with_valid_code(self, service, json_store, notifications):
        result = await service.submit(
            SubmissionType.RSVP,
            {
                "code": "IC-1234",
                "firstName": "Ava",
                "lastName": "Stone",
                "plusOne": "no",
                "notify": "email",
                "email": "ava@example.com",
            },
        )

        assert result.ok
        assert result.to_dict(include_id=False) == {"ok": True}
        rows = await json_store.list_records("rsvps")
        assert len(rows) == 1
        assert rows[0]["firstName"] == "Ava"
        assert rows[0]["code"] == "IC-1234"
        assert notifications.pending == 1

    async def test_rsvp_falls_back_to_session_code(self, service, json_store):
        gate = GateContext(state=GateState.UNLOCKED, valid_code="VIP456", unlocked_at=1.0)

        result = await service.submit(
            SubmissionType.RSVP,
            {"firstName": "Ava", "lastName": "Stone", "plusOne": "yes", "notify": "text"},
            gate,
        )

        assert result.ok
        rows = await json_store.list_records("rsvps")
        assert rows[0]["code"] == "VIP456"

    async def test_rsvp_without_any_code(self, service, json_store):
        result = await service.submit(
            SubmissionType.RSVP,
            {"firstName": "Ava", "lastName": "Stone", "plusOne": "yes", "notify": "text"},
        )

        assert result.to_dict() == {"ok": False, "error": "invalid-code"}
        assert await json_store.count("rsvps") == 0


class TestSubmitConcierge:
    """Tests for concierge requests."""

    async def test_missing_type_of_request(self, service, json_store, notifications):
        result = await service.submit(
            SubmissionType.CONCIERGE,
            {"fullName": "Jet Rivera", "email": "jet@example.com"},
        )

        assert result.ok is False
        assert result.error == "missing required fields"
        assert await json_store.count("requests") == 0
        assert notifications.pending == 0

    async def test_honeypot_is_indistinguishable(self, service, json_store):
        bot = await service.submit(
            SubmissionType.CONCIERGE,
            {
                "fullName": "Jet Rivera",
                "email": "jet@example.com",
                "typeOfRequest": "Dinner",
                "company": "Spam Inc",
            },
        )
        human = await service.submit(SubmissionType.CONCIERGE, {"fullName": "Jet Rivera"})

        assert bot.to_dict() == human.to_dict()
        assert await json_store.count("requests") == 0

    async def test_success_returns_id(self, service, json_store):
        result = await service.submit(
            "concierge",
            {"fullName": "Jet Rivera", "email": "jet@example.com", "typeOfRequest": "Dinner"},
        )

        assert result.ok
        rows = await json_store.list_records("requests")
        assert result.to_dict() == {"ok": True, "id": rows[0]["id"]}


class TestStorageFailure:
    async def test_storage_error_propagates_without_notification(self, validator, notifications):
        class BrokenStore:
            async def append(self, collection, fields):
                raise StorageError(collection, "disk full")

        service = IntakeService(validator, BrokenStore(), notifications)

        with pytest.raises(StorageError):
            await service.submit(
                SubmissionType.SEAT_REQUEST,
                {"fullName": "Lee Park", "email": "lee@example.com"},
            )
        assert notifications.pending == 0
