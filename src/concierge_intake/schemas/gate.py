# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pydantic schemas for gate and health endpoints."""

from datetime import datetime

from pydantic import BaseModel


class OkResponse(BaseModel):
    """Bare success flag."""

    ok: bool


class SubmissionResponse(BaseModel):
    """Response schema for intake submissions."""

    ok: bool
    id: str | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    ok: bool = True
    time: datetime
    version: str
