# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Shared pytest fixtures for testing."""

import pytest
from fastapi.testclient import TestClient

from concierge_intake.config import Settings
from concierge_intake.main import create_app
from concierge_intake.services.access_codes import AccessCodeRegistry
from concierge_intake.services.admin_auth import hash_password
from concierge_intake.services.gate_session import GateSession
from concierge_intake.services.intake_validator import IntakeValidator
from concierge_intake.services.record_store import JsonFileRecordStore

ACCESS_CODE = "IC-1234"
INVITE_SECRET = "test-invite-secret"
ADMIN_EMAIL = "host@example.com"
ADMIN_PASSWORD = "correct horse battery staple"


class FakeClock:
    """Manually advanced clock for gate TTL and cooldown tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture
def settings(tmp_path, admin_password_hash) -> Settings:
    """Settings isolated from the environment, storing into ``tmp_path``."""
    return Settings(
        _env_file=None,
        environment="test",
        log_format="console",
        session_secret="test-session-secret",
        access_codes=f"{ACCESS_CODE},VIP456",
        invite_signing_secret=INVITE_SECRET,
        invite_base_url="https://rsvp.example.com",
        gate_cooldown_ms=0,
        storage_backend="json",
        data_dir=tmp_path / "data",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'intake.db'}",
        rate_limit_enabled=False,
        notify_enabled=False,
        admin_email=ADMIN_EMAIL,
        admin_password_hash=admin_password_hash,
    )


@pytest.fixture
def registry() -> AccessCodeRegistry:
    return AccessCodeRegistry([ACCESS_CODE, "VIP456"])


@pytest.fixture
def validator(registry) -> IntakeValidator:
    return IntakeValidator(registry)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def gate(registry, clock) -> GateSession:
    return GateSession(registry, INVITE_SECRET, ttl_seconds=3600, cooldown_seconds=0.9, clock=clock)


@pytest.fixture
def json_store(tmp_path) -> JsonFileRecordStore:
    return JsonFileRecordStore(tmp_path / "data")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Create a test client for the FastAPI app."""
    with TestClient(app) as test_client:
        yield test_client
