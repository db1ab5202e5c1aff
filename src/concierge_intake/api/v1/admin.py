# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Admin read access to stored records."""

from fastapi import APIRouter, Depends

from concierge_intake.api.deps import get_record_store, require_admin
from concierge_intake.errors import IntakeError, IntakeErrorCode
from concierge_intake.logging_config import get_logger
from concierge_intake.schemas.auth import RecordListResponse
from concierge_intake.services.intake_validator import COLLECTIONS
from concierge_intake.services.record_store import RecordStore

logger = get_logger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get(
    "/records/{collection}",
    response_model=RecordListResponse,
    summary="List a collection",
    description="Every record of one collection, oldest first. Admin session required.",
)
async def list_records(
    collection: str,
    admin_email: str = Depends(require_admin),
    store: RecordStore = Depends(get_record_store),
) -> RecordListResponse:
    if collection not in COLLECTIONS:
        raise IntakeError(IntakeErrorCode.NOT_FOUND, details={"collection": collection})

    records = await store.list_records(collection)
    logger.info("Records listed", collection=collection, total=len(records), admin=admin_email)
    return RecordListResponse(collection=collection, records=records, total=len(records))
