# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Gate session: the per-client locked/unlocked state.

The state lives in the client's session mapping (a signed cookie in the HTTP
layer, a plain dict in tests). A session starts LOCKED, becomes UNLOCKED on a
valid access code or invite token, and falls back to LOCKED only when the TTL
measured from the first unlock runs out.
"""

import time
from collections.abc import Callable, MutableMapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from concierge_intake.logging_config import get_logger
from concierge_intake.services.access_codes import AccessCodeRegistry
from concierge_intake.services.token_codec import InvitePayload, verify_invite_token

logger = get_logger(__name__)

UNLOCKED_AT_KEY = "gate_unlocked_at"
VALID_CODE_KEY = "gate_valid_code"
INVITEE_EMAIL_KEY = "gate_invitee_email"
LAST_ATTEMPT_KEY = "gate_last_attempt"

_GATE_KEYS = (UNLOCKED_AT_KEY, VALID_CODE_KEY, INVITEE_EMAIL_KEY, LAST_ATTEMPT_KEY)


class GateState(str, Enum):
    """State of a gate session."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"


@dataclass(frozen=True)
class GateContext:
    """Snapshot of a gate session, threaded through intake operations."""

    state: GateState = GateState.LOCKED
    valid_code: str | None = None
    invitee_email: str | None = None
    unlocked_at: float | None = None

    @property
    def is_unlocked(self) -> bool:
        return self.state == GateState.UNLOCKED


LOCKED = GateContext()


class GateSession:
    """Gate state machine over a session mapping."""

    def __init__(
        self,
        registry: AccessCodeRegistry,
        signing_secret: str,
        ttl_seconds: int,
        cooldown_seconds: float = 0.9,
        clock: Callable[[], float] = time.time,
    ):
        self.registry = registry
        self._signing_secret = signing_secret
        self._ttl = ttl_seconds
        self._cooldown = cooldown_seconds
        self._clock = clock

    def context(self, session: MutableMapping[str, Any]) -> GateContext:
        """Read the gate state, expiring it if the TTL has passed."""
        unlocked_at = session.get(UNLOCKED_AT_KEY)
        if unlocked_at is None:
            return LOCKED

        if self._clock() - float(unlocked_at) > self._ttl:
            logger.info("Gate session expired", unlocked_at=unlocked_at)
            for key in _GATE_KEYS:
                session.pop(key, None)
            return LOCKED

        return GateContext(
            state=GateState.UNLOCKED,
            valid_code=session.get(VALID_CODE_KEY),
            invitee_email=session.get(INVITEE_EMAIL_KEY),
            unlocked_at=float(unlocked_at),
        )

    def verify_code(self, session: MutableMapping[str, Any], code: object) -> bool:
        """Try to unlock the session with an access code.

        Returns True when the session is unlocked afterwards by this code or
        was already unlocked and the code is valid. While locked, attempts
        inside the cooldown window are ignored.
        """
        current = self.context(session)
        now = self._clock()

        if not current.is_unlocked:
            last_attempt = session.get(LAST_ATTEMPT_KEY)
            session[LAST_ATTEMPT_KEY] = now
            if last_attempt is not None and now - float(last_attempt) < self._cooldown:
                logger.info("Gate attempt throttled")
                return False

        if not self.registry.is_valid(code):
            logger.info("Access code rejected", unlocked=current.is_unlocked)
            return False

        if current.is_unlocked:
            return True

        self._unlock(session, now)
        session[VALID_CODE_KEY] = self.registry.normalize(code)
        logger.info("Gate unlocked", method="code")
        return True

    def redeem_invite(
        self, session: MutableMapping[str, Any], token: str | None
    ) -> InvitePayload | None:
        """Try to unlock the session with a signed invite token."""
        payload = verify_invite_token(token, self._signing_secret, now=self._clock())
        if payload is None:
            logger.info("Invite token rejected")
            return None

        current = self.context(session)
        if not current.is_unlocked:
            self._unlock(session, self._clock())
            session[INVITEE_EMAIL_KEY] = payload.email
            logger.info("Gate unlocked", method="invite")
        return payload

    def _unlock(self, session: MutableMapping[str, Any], now: float) -> None:
        session[UNLOCKED_AT_KEY] = now
        session.pop(LAST_ATTEMPT_KEY, None)
