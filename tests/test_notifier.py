"""Tests for notifications."""

import asyncio
from datetime import datetime, timezone

import pytest

from concierge_intake.config import Settings
from concierge_intake.services.notifier import EmailNotifier, NotificationQueue
from concierge_intake.services.record_store import StoredRecord


def make_record(collection="requests", **fields):
    return StoredRecord(
        id="0123456789abcdef0123456789abcdef",
        collection=collection,
        created_at=datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        fields=fields or {"fullName": "Jet <Rivera>", "email": "jet@example.com"},
    )


class RecordingNotifier:
    def __init__(self, fail_on=()):
        self.records = []
        self.fail_on = set(fail_on)

    async def notify(self, record):
        if record.id in self.fail_on:
            raise RuntimeError("smtp down")
        self.records.append(record)


class TestEmailNotifier:
    """Tests for EmailNotifier."""

    def test_build_message(self):
        notifier = EmailNotifier(
            Settings(_env_file=None, notify_to="host@example.com, ops@example.com", notify_from="club@example.com")
        )

        msg = notifier.build_message(make_record())

        assert msg["Subject"] == "New concierge request (01234567)"
        assert msg["To"] == "host@example.com, ops@example.com"
        assert msg["From"] == "club@example.com"
        plain, html = msg.get_payload()
        assert "fullName: Jet <Rivera>" in plain.get_payload(decode=True).decode()
        assert "Jet &lt;Rivera&gt;" in html.get_payload(decode=True).decode()

    async def test_disabled_does_not_send(self, monkeypatch):
        notifier = EmailNotifier(Settings(_env_file=None, notify_enabled=False, notify_to="host@example.com"))

        def fail(msg):
            raise AssertionError("should not send")

        monkeypatch.setattr(notifier, "_send_sync", fail)

        await notifier.notify(make_record())

    async def test_enabled_sends(self, monkeypatch):
        notifier = EmailNotifier(Settings(_env_file=None, notify_enabled=True, notify_to="host@example.com"))
        sent = []
        monkeypatch.setattr(notifier, "_send_sync", sent.append)

        await notifier.notify(make_record("seat_requests"))

        assert len(sent) == 1
        assert sent[0]["Subject"].startswith("New seat request")


class TestNotificationQueue:
    """Tests for NotificationQueue."""

    async def test_worker_delivers_records(self):
        notifier = RecordingNotifier()
        queue = NotificationQueue(notifier)
        queue.start()
        try:
            assert queue.enqueue(make_record())
            await asyncio.wait_for(queue.drain(), timeout=2)
        finally:
            await queue.stop()

        assert len(notifier.records) == 1
        assert queue.sent == 1

    async def test_failures_are_swallowed(self):
        bad = make_record()
        notifier = RecordingNotifier(fail_on=[bad.id])
        queue = NotificationQueue(notifier)

        await queue.process_one(bad)

        assert queue.failed == 1
        assert queue.sent == 0

    async def test_full_queue_drops(self):
        queue = NotificationQueue(RecordingNotifier(), maxsize=1)

        assert queue.enqueue(make_record())
        assert not queue.enqueue(make_record())
        assert queue.dropped == 1
        assert queue.pending == 1

    async def test_stop_without_start(self):
        queue = NotificationQueue(RecordingNotifier())

        await queue.stop()


@pytest.mark.parametrize(
    "collection,subject",
    [("rsvps", "New RSVP"), ("applications", "New membership application"), ("other", "New submission")],
)
def test_subjects(collection, subject):
    notifier = EmailNotifier(Settings(_env_file=None))

    assert notifier.build_message(make_record(collection))["Subject"].startswith(subject)
