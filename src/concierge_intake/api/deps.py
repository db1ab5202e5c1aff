# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Shared request dependencies and the rate limiter."""

from typing import Any

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from concierge_intake.errors import AuthError, IntakeErrorCode
from concierge_intake.services.admin_auth import AdminAuthenticator
from concierge_intake.services.gate_session import GateContext, GateSession
from concierge_intake.services.intake_service import IntakeService
from concierge_intake.services.record_store import RecordStore

# Rate limiter instance, toggled by create_app()
limiter = Limiter(key_func=get_remote_address)

ADMIN_SESSION_KEY = "admin_email"


def get_gate(request: Request) -> GateSession:
    return request.app.state.gate


def get_gate_context(request: Request) -> GateContext:
    """Current gate state of the caller's session."""
    return request.app.state.gate.context(request.session)


def get_intake_service(request: Request) -> IntakeService:
    return request.app.state.intake


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_authenticator(request: Request) -> AdminAuthenticator:
    return request.app.state.admin


def require_admin(request: Request) -> str:
    """Return the logged-in admin email or raise ``AuthError``."""
    email = request.session.get(ADMIN_SESSION_KEY)
    if not email:
        raise AuthError(IntakeErrorCode.NOT_AUTHENTICATED)
    return email


async def read_fields(request: Request) -> dict[str, Any]:
    """Read a JSON body as a flat mapping.

    Anything that is not a JSON object decodes to an empty mapping, which then
    fails validation like a blank form would.
    """
    body = await request.body()
    if not body.strip():
        return {}
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
