# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Intake tables.

Required form fields are ``NOT NULL`` here as a second line of defense behind
the validator. Rows are insert-only.
"""

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from concierge_intake.models.base import Base, RecordMixin


class Rsvp(Base, RecordMixin):
    """RSVP for a gated event."""

    __tablename__ = "rsvps"

    code: Mapped[str] = mapped_column(String(48), nullable=False)
    first_name: Mapped[str] = mapped_column(String(80), nullable=False)
    last_name: Mapped[str] = mapped_column(String(80), nullable=False)
    plus_one: Mapped[str] = mapped_column(String(10), nullable=False)
    guest_name: Mapped[str | None] = mapped_column(String(160), nullable=True)
    notify: Mapped[str] = mapped_column(String(10), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    diet: Mapped[str | None] = mapped_column(String(300), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("idx_rsvps_code", "code"),)


class ConciergeRequest(Base, RecordMixin):
    """Concierge booking request."""

    __tablename__ = "requests"

    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    type_of_request: Mapped[str] = mapped_column(String(80), nullable=False)
    date: Mapped[str | None] = mapped_column(String(40), nullable=True)
    time: Mapped[str | None] = mapped_column(String(40), nullable=True)
    party_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    neighborhood: Mapped[str | None] = mapped_column(String(120), nullable=True)
    budget: Mapped[str | None] = mapped_column(String(80), nullable=True)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)


class MembershipApplication(Base, RecordMixin):
    """Membership application."""

    __tablename__ = "applications"

    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    dob: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    address: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    company: Mapped[str] = mapped_column(String(120), nullable=False)
    industry: Mapped[str] = mapped_column(String(120), nullable=False)
    role: Mapped[str] = mapped_column(String(120), nullable=False)
    bio: Mapped[str] = mapped_column(Text, nullable=False)
    socials: Mapped[str | None] = mapped_column(String(500), nullable=True)
    headshot_key: Mapped[str | None] = mapped_column(String(300), nullable=True)

    __table_args__ = (Index("idx_applications_email", "email"),)


class SeatRequest(Base, RecordMixin):
    """Member request for a seat at a listed event."""

    __tablename__ = "seat_requests"

    full_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    party_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    dietary: Mapped[str | None] = mapped_column(String(300), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    marketing_consent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    member_id: Mapped[str | None] = mapped_column(String(40), nullable=True)
    event_id: Mapped[str | None] = mapped_column(String(80), nullable=True)
    event_title: Mapped[str | None] = mapped_column(String(160), nullable=True)
    event_meta: Mapped[str | None] = mapped_column(String(160), nullable=True)


# Collection name -> table model
MODELS_BY_COLLECTION: dict[str, type[Base]] = {
    "rsvps": Rsvp,
    "requests": ConciergeRequest,
    "applications": MembershipApplication,
    "seat_requests": SeatRequest,
}
