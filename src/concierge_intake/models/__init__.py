"""SQLAlchemy models."""

from concierge_intake.models.base import Base
from concierge_intake.models.intake import (
    MODELS_BY_COLLECTION,
    ConciergeRequest,
    MembershipApplication,
    Rsvp,
    SeatRequest,
)

__all__ = [
    "Base",
    "ConciergeRequest",
    "MembershipApplication",
    "MODELS_BY_COLLECTION",
    "Rsvp",
    "SeatRequest",
]
