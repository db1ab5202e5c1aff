# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Intake service: validate, persist, notify."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from concierge_intake.errors import BotRejectionError, IntakeErrorCode, IntakeValidationError
from concierge_intake.logging_config import get_logger
from concierge_intake.services.gate_session import LOCKED, GateContext
from concierge_intake.services.intake_validator import (
    IntakeValidator,
    SubmissionType,
    get_spec,
)
from concierge_intake.services.notifier import NotificationQueue
from concierge_intake.services.record_store import RecordStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a submission as seen by the caller."""

    ok: bool
    id: str | None = None
    error: str | None = None
    code: IntakeErrorCode | None = None

    def to_dict(self, include_id: bool = True) -> dict[str, Any]:
        if not self.ok:
            return {"ok": False, "error": self.error}
        if include_id:
            return {"ok": True, "id": self.id}
        return {"ok": True}


class IntakeService:
    """Ties the validator, the record store and the notification queue."""

    def __init__(
        self,
        validator: IntakeValidator,
        store: RecordStore,
        notifications: NotificationQueue | None = None,
    ):
        self.validator = validator
        self.store = store
        self.notifications = notifications

    async def submit(
        self,
        submission_type: SubmissionType | str,
        raw_fields: Mapping[str, Any],
        gate: GateContext = LOCKED,
    ) -> SubmitResult:
        """Validate and persist one submission.

        Validation failures and bot rejections come back as ``ok=False`` with
        nothing stored. ``StorageError`` propagates: the record is then either
        fully persisted or absent.
        """
        spec = get_spec(submission_type)
        fields = dict(raw_fields)

        # RSVP forms reached through the gate may omit the code
        if spec.type == SubmissionType.RSVP and not str(fields.get("code") or "").strip():
            if gate.valid_code:
                fields["code"] = gate.valid_code

        try:
            record_fields = self.validator.validate(spec.type, fields)
        except BotRejectionError as exc:
            logger.warning("Submission rejected by honeypot", submission_type=spec.type.value)
            return SubmitResult(ok=False, error=exc.message, code=exc.code)
        except IntakeValidationError as exc:
            logger.info(
                "Submission failed validation",
                submission_type=spec.type.value,
                error_code=exc.code.value,
                fields=exc.fields,
            )
            return SubmitResult(ok=False, error=exc.message, code=exc.code)

        record = await self.store.append(spec.collection, record_fields)

        if self.notifications is not None:
            self.notifications.enqueue(record)

        logger.info(
            "Submission accepted",
            submission_type=spec.type.value,
            record_id=record.id,
            invited=bool(gate.invitee_email),
        )
        return SubmitResult(ok=True, id=record.id)
