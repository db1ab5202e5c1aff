# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Signed, expiring invite tokens.

Wire format::

    base64url(JSON {"email", "exp"}) + "." + base64url(HMAC-SHA256(secret, <first part>))

Both parts are unpadded base64url. Tokens are stateless: nothing is stored
server-side, and a token stays valid until ``exp`` passes.
"""

import base64
import binascii
import hashlib
import hmac
import json
import math
import time
from dataclasses import dataclass
from urllib.parse import urlencode


@dataclass(frozen=True)
class InvitePayload:
    """Decoded invite token payload."""

    email: str
    exp: int


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


def _sign(encoded_payload: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"),
        encoded_payload.encode("ascii"),
        hashlib.sha256,
    ).digest()
    return _b64url_encode(digest)


def issue_invite_token(
    email: str,
    ttl_seconds: int,
    secret: str,
    now: float | None = None,
) -> str:
    """Issue a signed invite token for ``email``.

    Args:
        email: Invitee email address
        ttl_seconds: Seconds until the token expires (must be positive)
        secret: HMAC signing secret
        now: Current unix time, defaults to ``time.time()``

    Returns:
        The ``payload.signature`` token string

    Raises:
        ValueError: If email or secret is empty, or ttl is not positive
    """
    email = (email or "").strip()
    secret = (secret or "").strip()
    if not email:
        raise ValueError("email is required")
    if not secret:
        raise ValueError("signing secret is not configured")
    if ttl_seconds <= 0:
        raise ValueError("ttl_seconds must be positive")

    issued_at = int(time.time() if now is None else now)
    payload = {"email": email, "exp": issued_at + int(ttl_seconds)}
    encoded = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    return f"{encoded}.{_sign(encoded, secret)}"


def verify_invite_token(
    token: str | None,
    secret: str,
    now: float | None = None,
) -> InvitePayload | None:
    """Verify a signed invite token.

    Every failure (bad shape, undecodable payload, missing claims, expiry,
    bad signature, signing disabled) returns ``None``; callers must not tell
    users why a token failed.
    """
    secret = (secret or "").strip()
    if not secret or not token:
        return None

    encoded, _, signature = str(token).partition(".")
    if not encoded or not signature:
        return None

    try:
        data = json.loads(_b64url_decode(encoded).decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeError):
        return None

    if not isinstance(data, dict):
        return None
    email = data.get("email")
    exp = data.get("exp")
    if not email or not exp or not isinstance(email, str):
        return None
    if isinstance(exp, bool):
        return None
    try:
        exp_value = float(exp)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(exp_value):
        return None

    current = time.time() if now is None else now
    if int(current) > exp_value:
        return None

    expected = _sign(encoded, secret).encode("ascii")
    if not hmac.compare_digest(expected, signature.encode("utf-8")):
        return None

    return InvitePayload(email=email, exp=int(exp_value))


def build_invite_url(
    base_url: str,
    token: str,
    code: str | None = None,
    name: str | None = None,
) -> str:
    """Build the shareable ``/invite`` link for a token."""
    params = {"t": token}
    if code:
        params["c"] = code
    if name:
        params["name"] = name
    return f"{base_url.rstrip('/')}/invite?{urlencode(params)}"
