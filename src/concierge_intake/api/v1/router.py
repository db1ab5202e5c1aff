"""API v1 router assembly."""

from fastapi import APIRouter

from concierge_intake.api.v1 import admin, auth, gate, intake

router = APIRouter()

router.include_router(gate.router)
router.include_router(intake.router)
router.include_router(auth.router)
router.include_router(admin.router)

# Invite links live at the site root
invite_router = gate.invite_router
