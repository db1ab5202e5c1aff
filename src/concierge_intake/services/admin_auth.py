# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Single-admin login backed by a passlib password hash."""

import hmac

from passlib.hash import pbkdf2_sha256

from concierge_intake.errors import AdminNotConfiguredError, AuthError
from concierge_intake.logging_config import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password for ``INTAKE_ADMIN_PASSWORD_HASH``."""
    return pbkdf2_sha256.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash; malformed hashes never match."""
    try:
        return pbkdf2_sha256.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


class AdminAuthenticator:
    """Checks admin credentials against configuration."""

    def __init__(self, email: str, password_hash: str):
        self.email = (email or "").strip().lower()
        self.password_hash = (password_hash or "").strip()

    @property
    def configured(self) -> bool:
        return bool(self.email and self.password_hash)

    def authenticate(self, email: str, password: str) -> str:
        """Return the admin email on success.

        Raises:
            AdminNotConfiguredError: No admin email/hash configured
            AuthError: Wrong email or password
        """
        if not self.configured:
            logger.error("Admin login attempted but admin is not configured")
            raise AdminNotConfiguredError()

        candidate = (email or "").strip().lower()
        email_ok = hmac.compare_digest(candidate.encode("utf-8"), self.email.encode("utf-8"))
        password_ok = verify_password(password or "", self.password_hash)
        if not (email_ok and password_ok):
            logger.info("Admin login rejected")
            raise AuthError()

        logger.info("Admin logged in")
        return self.email
