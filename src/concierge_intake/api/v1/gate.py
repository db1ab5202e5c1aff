# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Gate endpoints: access code check and signed invite links."""

from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from concierge_intake.api.deps import get_gate, limiter, read_fields
from concierge_intake.config import get_settings
from concierge_intake.schemas.gate import OkResponse
from concierge_intake.services.gate_session import GateSession

router = APIRouter(prefix="/api", tags=["gate"])
invite_router = APIRouter(tags=["gate"])


@router.post(
    "/verify-code",
    response_model=OkResponse,
    summary="Check an access code",
    description="Unlocks the caller's session when the code is on the allow-list.",
)
@limiter.limit(get_settings().rate_limit_gate)
async def verify_code(
    request: Request,
    gate: GateSession = Depends(get_gate),
) -> OkResponse:
    """Check an access code.

    A wrong code is not an error: the body is ``{"ok": false}`` with status
    200, and nothing about the allow-list leaks.
    """
    fields = await read_fields(request)
    return OkResponse(ok=gate.verify_code(request.session, fields.get("code")))


@invite_router.get(
    "/invite",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    summary="Redeem a signed invite link",
    responses={
        302: {"description": "Redirect to the RSVP form"},
        404: {"description": "Missing, forged or expired token"},
    },
)
@limiter.limit(get_settings().rate_limit_gate)
async def redeem_invite(
    request: Request,
    t: str | None = Query(None, description="Signed invite token"),
    c: str = Query("", description="Access code to prefill"),
    name: str = Query("", description="Guest name to prefill"),
    gate: GateSession = Depends(get_gate),
):
    """Validate the token, mark the session invited and send the guest to RSVP."""
    payload = gate.redeem_invite(request.session, t)
    if payload is None:
        return PlainTextResponse("Not found", status_code=status.HTTP_404_NOT_FOUND)

    params = {key: value for key, value in (("code", c), ("name", name)) if value}
    url = f"/rsvp?{urlencode(params)}" if params else "/rsvp"
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)
