# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Best-effort notifications for new intake records.

Requests hand records to a bounded ``NotificationQueue``; a single worker
task drains it and calls the notifier. Failures are logged and dropped, never
retried, and never reach the submitter.
"""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape
from typing import Protocol

from concierge_intake.config import Settings
from concierge_intake.logging_config import get_logger
from concierge_intake.services.record_store import StoredRecord

logger = get_logger(__name__)

_SUBJECTS = {
    "rsvps": "New RSVP",
    "requests": "New concierge request",
    "applications": "New membership application",
    "seat_requests": "New seat request",
}


class Notifier(Protocol):
    async def notify(self, record: StoredRecord) -> None: ...


class EmailNotifier:
    """Sends a summary email for each record over SMTP."""

    def __init__(self, settings: Settings):
        self.enabled = settings.notify_enabled
        self.recipients = settings.notify_recipients
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.smtp_from = settings.notify_from
        self.smtp_tls = settings.smtp_tls

    def build_message(self, record: StoredRecord) -> MIMEMultipart:
        subject = f"{_SUBJECTS.get(record.collection, 'New submission')} ({record.id[:8]})"
        rows = [(key, "" if value is None else str(value)) for key, value in record.to_dict().items()]

        text_body = "\n".join(f"{key}: {value}" for key, value in rows)
        html_rows = "".join(
            f"<tr><th align='left'>{escape(key)}</th><td>{escape(value)}</td></tr>"
            for key, value in rows
        )
        html_body = f"<html><body><h2>{escape(subject)}</h2><table>{html_rows}</table></body></html>"

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.smtp_from
        msg["To"] = ", ".join(self.recipients)
        msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))
        return msg

    def _send_sync(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=15) as server:
            if self.smtp_tls:
                server.starttls()
            if self.smtp_user and self.smtp_password:
                server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.smtp_from, self.recipients, msg.as_string())

    async def notify(self, record: StoredRecord) -> None:
        if not self.enabled or not self.recipients:
            logger.info(
                "Email notifications disabled",
                collection=record.collection,
                record_id=record.id,
            )
            return

        await asyncio.to_thread(self._send_sync, self.build_message(record))
        logger.info("Notification sent", collection=record.collection, record_id=record.id)


class NotificationQueue:
    """Bounded queue between request handlers and the notifier."""

    def __init__(self, notifier: Notifier, maxsize: int = 100):
        self.notifier = notifier
        self._queue: asyncio.Queue[StoredRecord] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task | None = None
        self.sent = 0
        self.failed = 0
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def enqueue(self, record: StoredRecord) -> bool:
        """Queue a record without waiting. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Notification queue full, dropping",
                collection=record.collection,
                record_id=record.id,
            )
            return False
        return True

    async def process_one(self, record: StoredRecord) -> None:
        try:
            await self.notifier.notify(record)
            self.sent += 1
        except Exception:
            self.failed += 1
            logger.exception(
                "Notification failed",
                collection=record.collection,
                record_id=record.id,
            )

    async def _run(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                await self.process_one(record)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="notification-worker")

    async def drain(self) -> None:
        """Wait until every queued record has been handled."""
        await self._queue.join()

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
