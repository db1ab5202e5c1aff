# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Admin login endpoints."""

from fastapi import APIRouter, Depends, Request

from concierge_intake.api.deps import (
    ADMIN_SESSION_KEY,
    get_authenticator,
    limiter,
    read_fields,
    require_admin,
)
from concierge_intake.config import get_settings
from concierge_intake.schemas.auth import AdminSessionResponse
from concierge_intake.schemas.gate import OkResponse
from concierge_intake.services.admin_auth import AdminAuthenticator

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=OkResponse,
    summary="Admin login",
    responses={
        401: {"description": "Invalid credentials"},
        500: {"description": "Admin credentials not configured"},
    },
)
@limiter.limit(get_settings().rate_limit_gate)
async def login(
    request: Request,
    authenticator: AdminAuthenticator = Depends(get_authenticator),
) -> OkResponse:
    """Check admin credentials and mark the session as admin.

    Raises:
        AuthError: 401 on a wrong email or password
        AdminNotConfiguredError: 500 when no admin is configured
    """
    fields = await read_fields(request)
    email = authenticator.authenticate(
        str(fields.get("email") or ""),
        str(fields.get("password") or ""),
    )
    request.session[ADMIN_SESSION_KEY] = email
    return OkResponse(ok=True)


@router.get("/me", response_model=AdminSessionResponse, summary="Current admin")
async def me(email: str = Depends(require_admin)) -> AdminSessionResponse:
    return AdminSessionResponse(email=email)


@router.post("/logout", response_model=OkResponse, summary="Admin logout")
async def logout(request: Request) -> OkResponse:
    request.session.pop(ADMIN_SESSION_KEY, None)
    return OkResponse(ok=True)
