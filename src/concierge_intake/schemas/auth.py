# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Pydantic schemas for admin endpoints."""

from typing import Any

from pydantic import BaseModel


class AdminSessionResponse(BaseModel):
    ok: bool = True
    email: str


class RecordListResponse(BaseModel):
    """Records of one collection, oldest first."""

    collection: str
    records: list[dict[str, Any]]
    total: int
