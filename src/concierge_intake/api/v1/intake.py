# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Form submission endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from concierge_intake.api.deps import (
    get_gate_context,
    get_intake_service,
    limiter,
    read_fields,
)
from concierge_intake.config import get_settings
from concierge_intake.errors import ERROR_CODE_TO_HTTP_STATUS
from concierge_intake.schemas.gate import SubmissionResponse
from concierge_intake.services.gate_session import GateContext
from concierge_intake.services.intake_service import IntakeService, SubmitResult
from concierge_intake.services.intake_validator import SubmissionType

router = APIRouter(prefix="/api", tags=["intake"])

_INTAKE_LIMIT = get_settings().rate_limit_intake


def _render(result: SubmitResult, include_id: bool = True) -> JSONResponse:
    status_code = 200 if result.ok else ERROR_CODE_TO_HTTP_STATUS.get(result.code, 400)
    return JSONResponse(result.to_dict(include_id=include_id), status_code=status_code)


@router.post(
    "/rsvp",
    response_model=SubmissionResponse,
    summary="Submit an RSVP",
    description="Requires a valid access code, from the body or the unlocked session.",
)
@limiter.limit(_INTAKE_LIMIT)
async def submit_rsvp(
    request: Request,
    service: IntakeService = Depends(get_intake_service),
    gate: GateContext = Depends(get_gate_context),
):
    result = await service.submit(SubmissionType.RSVP, await read_fields(request), gate)
    return _render(result, include_id=False)


@router.post(
    "/request",
    response_model=SubmissionResponse,
    summary="Submit a concierge request",
)
@router.post("/requests", response_model=SubmissionResponse, include_in_schema=False)
@limiter.limit(_INTAKE_LIMIT)
async def submit_concierge_request(
    request: Request,
    service: IntakeService = Depends(get_intake_service),
    gate: GateContext = Depends(get_gate_context),
):
    result = await service.submit(SubmissionType.CONCIERGE, await read_fields(request), gate)
    return _render(result)


@router.post(
    "/applications",
    response_model=SubmissionResponse,
    summary="Submit a membership application",
)
@limiter.limit(_INTAKE_LIMIT)
async def submit_application(
    request: Request,
    service: IntakeService = Depends(get_intake_service),
    gate: GateContext = Depends(get_gate_context),
):
    result = await service.submit(SubmissionType.APPLICATION, await read_fields(request), gate)
    return _render(result)


@router.post(
    "/inner-circle-request",
    response_model=SubmissionResponse,
    summary="Request a seat at a members' event",
)
@limiter.limit(_INTAKE_LIMIT)
async def submit_seat_request(
    request: Request,
    service: IntakeService = Depends(get_intake_service),
    gate: GateContext = Depends(get_gate_context),
):
    result = await service.submit(SubmissionType.SEAT_REQUEST, await read_fields(request), gate)
    return _render(result)
