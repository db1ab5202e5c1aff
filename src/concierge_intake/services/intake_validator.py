# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Per-submission-type normalization and validation.

Each submission type declares its fields once (kind, max length, required)
and its honeypot. ``IntakeValidator.validate`` turns a raw form mapping into
a clean record or raises ``IntakeValidationError`` / ``BotRejectionError``.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from concierge_intake.errors import (
    BotRejectionError,
    IntakeErrorCode,
    IntakeValidationError,
)
from concierge_intake.services.access_codes import AccessCodeRegistry

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_JUNK = re.compile(r"[^\d+]")

_TRUTHY = {"1", "true", "yes", "on", "y"}


class SubmissionType(str, Enum):
    """Kinds of intake submissions."""

    RSVP = "rsvp"
    CONCIERGE = "concierge"
    APPLICATION = "application"
    SEAT_REQUEST = "seat_request"


class FieldKind(str, Enum):
    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    CHOICE = "choice"
    CODE = "code"


@dataclass(frozen=True)
class FieldSpec:
    """One form field: wire name, kind, length cap and whether it is required."""

    name: str
    kind: FieldKind = FieldKind.TEXT
    required: bool = False
    max_length: int = 200
    minimum: int | None = None
    maximum: int | None = None
    default: Any = None


@dataclass(frozen=True)
class SubmissionSpec:
    """Field layout and error wording for a submission type."""

    type: SubmissionType
    collection: str
    fields: tuple[FieldSpec, ...]
    honeypot: str
    missing_message: str = "missing required fields"
    invalid_email_message: str = "invalid email"
    name_missing_field: bool = False

    @property
    def required(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields if f.required)

    def message_for(self, code: IntakeErrorCode, fields: list[str] | None = None) -> str:
        """Public error text for ``code``.

        Honeypot rejections reuse the generic missing-fields wording.
        """
        if code in (IntakeErrorCode.MISSING_FIELDS, IntakeErrorCode.REJECTED):
            if self.name_missing_field and fields:
                return f"missing field: {fields[0]}"
            return self.missing_message
        if code == IntakeErrorCode.INVALID_EMAIL:
            return self.invalid_email_message
        return code.value


RSVP_SPEC = SubmissionSpec(
    type=SubmissionType.RSVP,
    collection="rsvps",
    honeypot="website",
    missing_message=IntakeErrorCode.MISSING_FIELDS.value,
    invalid_email_message=IntakeErrorCode.INVALID_EMAIL.value,
    fields=(
        FieldSpec("code", FieldKind.CODE, required=True, max_length=48),
        FieldSpec("firstName", required=True, max_length=80),
        FieldSpec("lastName", required=True, max_length=80),
        FieldSpec("plusOne", FieldKind.CHOICE, required=True, max_length=10),
        FieldSpec("guestName", max_length=160),
        FieldSpec("notify", FieldKind.CHOICE, required=True, max_length=10),
        FieldSpec("email", FieldKind.EMAIL, max_length=254),
        FieldSpec("phone", FieldKind.PHONE, max_length=20),
        FieldSpec("diet", max_length=300),
        FieldSpec("notes", max_length=1000),
    ),
)

CONCIERGE_SPEC = SubmissionSpec(
    type=SubmissionType.CONCIERGE,
    collection="requests",
    honeypot="company",
    fields=(
        FieldSpec("fullName", required=True, max_length=120),
        FieldSpec("email", FieldKind.EMAIL, required=True, max_length=254),
        FieldSpec("phone", FieldKind.PHONE, max_length=20),
        FieldSpec("typeOfRequest", required=True, max_length=80),
        FieldSpec("date", max_length=40),
        FieldSpec("time", max_length=40),
        FieldSpec("partySize", FieldKind.INTEGER, minimum=1, maximum=50),
        FieldSpec("neighborhood", max_length=120),
        FieldSpec("budget", max_length=80),
        FieldSpec("details", max_length=2000),
    ),
)

APPLICATION_SPEC = SubmissionSpec(
    type=SubmissionType.APPLICATION,
    collection="applications",
    honeypot="website",
    name_missing_field=True,
    fields=(
        FieldSpec("fullName", required=True, max_length=120),
        FieldSpec("dob", required=True, max_length=20),
        FieldSpec("email", FieldKind.EMAIL, required=True, max_length=254),
        FieldSpec("phone", FieldKind.PHONE, required=True, max_length=20),
        FieldSpec("address", required=True, max_length=200),
        FieldSpec("city", required=True, max_length=100),
        FieldSpec("state", required=True, max_length=100),
        FieldSpec("country", required=True, max_length=100),
        FieldSpec("company", required=True, max_length=120),
        FieldSpec("industry", required=True, max_length=120),
        FieldSpec("role", required=True, max_length=120),
        FieldSpec("bio", required=True, max_length=2000),
        FieldSpec("socials", max_length=500),
        FieldSpec("headshotKey", max_length=300),
    ),
)

SEAT_REQUEST_SPEC = SubmissionSpec(
    type=SubmissionType.SEAT_REQUEST,
    collection="seat_requests",
    honeypot="honeypot",
    fields=(
        FieldSpec("fullName", required=True, max_length=120),
        FieldSpec("email", FieldKind.EMAIL, required=True, max_length=254),
        FieldSpec("phone", FieldKind.PHONE, max_length=20),
        FieldSpec("partySize", FieldKind.INTEGER, minimum=1, maximum=12, default=1),
        FieldSpec("dietary", max_length=300),
        FieldSpec("notes", max_length=1000),
        FieldSpec("marketingConsent", FieldKind.BOOLEAN, default=False),
        FieldSpec("memberId", max_length=40),
        FieldSpec("eventId", max_length=80),
        FieldSpec("eventTitle", max_length=160),
        FieldSpec("eventMeta", max_length=160),
    ),
)

SUBMISSION_SPECS: dict[SubmissionType, SubmissionSpec] = {
    spec.type: spec
    for spec in (RSVP_SPEC, CONCIERGE_SPEC, APPLICATION_SPEC, SEAT_REQUEST_SPEC)
}

COLLECTIONS: tuple[str, ...] = tuple(spec.collection for spec in SUBMISSION_SPECS.values())


def get_spec(submission_type: SubmissionType | str) -> SubmissionSpec:
    return SUBMISSION_SPECS[SubmissionType(submission_type)]


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple, dict)):
        return ""
    return str(value).strip()


def parse_int(
    value: Any,
    default: int | None = None,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int | None:
    """Parse an integer-ish value, falling back to ``default``."""
    if isinstance(value, bool):
        return default
    try:
        number = int(float(_as_text(value)))
    except (ValueError, OverflowError):
        return default
    if minimum is not None:
        number = max(minimum, number)
    if maximum is not None:
        number = min(maximum, number)
    return number


def normalize_phone(value: Any) -> str:
    """Keep digits and a single leading ``+``."""
    text = _as_text(value)
    digits = _PHONE_JUNK.sub("", text).replace("+", "")
    if text.startswith("+") and digits:
        return "+" + digits
    return digits


class IntakeValidator:
    """Normalizes and checks raw form submissions."""

    def __init__(self, registry: AccessCodeRegistry):
        self.registry = registry

    def normalize_field(self, spec: FieldSpec, value: Any) -> Any:
        if spec.kind == FieldKind.INTEGER:
            return parse_int(value, spec.default, spec.minimum, spec.maximum)
        if spec.kind == FieldKind.BOOLEAN:
            if isinstance(value, bool):
                return value
            text = _as_text(value).lower()
            return text in _TRUTHY if text else bool(spec.default)

        if spec.kind == FieldKind.PHONE:
            text = normalize_phone(value)
        elif spec.kind == FieldKind.CODE:
            text = self.registry.normalize(_as_text(value))
        elif spec.kind in (FieldKind.EMAIL, FieldKind.CHOICE):
            text = _as_text(value).lower()
        else:
            text = _as_text(value)
        return text[: spec.max_length]

    def validate(
        self,
        submission_type: SubmissionType | str,
        raw_fields: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Validate a raw submission.

        Args:
            submission_type: Which form was submitted
            raw_fields: Untrusted field mapping from the client

        Returns:
            Normalized record fields, ready for storage

        Raises:
            BotRejectionError: The honeypot field was filled in
            IntakeValidationError: Invalid code, missing fields or bad email
        """
        spec = get_spec(submission_type)

        if _as_text(raw_fields.get(spec.honeypot)):
            raise BotRejectionError(
                spec.honeypot,
                message=spec.message_for(IntakeErrorCode.REJECTED),
            )

        record = {f.name: self.normalize_field(f, raw_fields.get(f.name)) for f in spec.fields}

        code_fields = [f.name for f in spec.fields if f.kind == FieldKind.CODE]
        for name in code_fields:
            if not self.registry.is_valid(record[name]):
                raise IntakeValidationError(
                    IntakeErrorCode.INVALID_CODE,
                    fields=[name],
                    message=spec.message_for(IntakeErrorCode.INVALID_CODE),
                )

        missing = [name for name in spec.required if record[name] in ("", None)]
        if missing:
            raise IntakeValidationError(
                IntakeErrorCode.MISSING_FIELDS,
                fields=missing,
                message=spec.message_for(IntakeErrorCode.MISSING_FIELDS, missing),
            )

        for f in spec.fields:
            if f.kind == FieldKind.EMAIL and record[f.name] and not EMAIL_PATTERN.match(record[f.name]):
                raise IntakeValidationError(
                    IntakeErrorCode.INVALID_EMAIL,
                    fields=[f.name],
                    message=spec.message_for(IntakeErrorCode.INVALID_EMAIL),
                )

        return record
