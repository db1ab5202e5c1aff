# SPDX-License-Identifier: Apache-2.0
# Copyright 2024-2026 CAB Ingénierie / Christophe ABOULICAM
"""Error codes and exception classes for the intake API.

Every error renders to the same flat body the browser forms expect:

```json
{"ok": false, "error": "missing-fields"}
```

Auth failures are deliberately low-detail, and bot rejections render exactly
like a generic validation failure so automated clients cannot tell them apart.
"""

from enum import Enum
from typing import Any


class IntakeErrorCode(str, Enum):
    """Machine-readable error codes."""

    # 400 Bad Request
    MISSING_FIELDS = "missing-fields"
    INVALID_CODE = "invalid-code"
    INVALID_EMAIL = "invalid-email"
    REJECTED = "rejected"

    # 401 Unauthorized
    INVALID_CREDENTIALS = "invalid-credentials"
    NOT_AUTHENTICATED = "not-authenticated"

    # 404 Not Found
    NOT_FOUND = "not-found"

    # 500 Internal Server Error
    ADMIN_NOT_CONFIGURED = "admin-not-configured"
    STORAGE_ERROR = "storage-error"
    INTERNAL_ERROR = "internal-error"


ERROR_CODE_TO_HTTP_STATUS: dict[IntakeErrorCode, int] = {
    IntakeErrorCode.MISSING_FIELDS: 400,
    IntakeErrorCode.INVALID_CODE: 400,
    IntakeErrorCode.INVALID_EMAIL: 400,
    IntakeErrorCode.REJECTED: 400,
    IntakeErrorCode.INVALID_CREDENTIALS: 401,
    IntakeErrorCode.NOT_AUTHENTICATED: 401,
    IntakeErrorCode.NOT_FOUND: 404,
    IntakeErrorCode.ADMIN_NOT_CONFIGURED: 500,
    IntakeErrorCode.STORAGE_ERROR: 500,
    IntakeErrorCode.INTERNAL_ERROR: 500,
}


class IntakeError(Exception):
    """Base exception for intake errors.

    Usage:
        raise IntakeError(
            code=IntakeErrorCode.NOT_FOUND,
            message="not-found",
            details={"collection": name},
        )

    ``message`` is what the caller sees; ``details`` is for logs only.
    """

    def __init__(
        self,
        code: IntakeErrorCode | str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.code = code if isinstance(code, IntakeErrorCode) else IntakeErrorCode(code)
        self.message = message or self.code.value
        self.details = details or {}
        super().__init__(self.message)

    @property
    def http_status(self) -> int:
        """Get HTTP status code for this error."""
        return ERROR_CODE_TO_HTTP_STATUS.get(self.code, 500)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the public response body."""
        return {"ok": False, "error": self.message}


class IntakeValidationError(IntakeError):
    """Raised when a submission is missing fields or has malformed values."""

    def __init__(
        self,
        code: IntakeErrorCode,
        fields: list[str] | None = None,
        message: str | None = None,
    ):
        super().__init__(code=code, message=message, details={"fields": fields or []})
        self.fields = fields or []


class BotRejectionError(IntakeError):
    """Raised when the honeypot field of a form was filled in."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(
            code=IntakeErrorCode.REJECTED,
            message=message,
            details={"honeypot": field},
        )
        self.field = field


class AuthError(IntakeError):
    """Raised on bad admin credentials or a missing admin session."""

    def __init__(self, code: IntakeErrorCode = IntakeErrorCode.INVALID_CREDENTIALS):
        super().__init__(code=code)


class AdminNotConfiguredError(IntakeError):
    """Raised when admin login is attempted without configured credentials."""

    def __init__(self):
        super().__init__(code=IntakeErrorCode.ADMIN_NOT_CONFIGURED)


class StorageError(IntakeError):
    """Raised when a record could not be read or persisted.

    The public message stays generic; the cause is kept in ``details``.
    """

    def __init__(self, collection: str, reason: str):
        super().__init__(
            code=IntakeErrorCode.STORAGE_ERROR,
            message=IntakeErrorCode.INTERNAL_ERROR.value,
            details={"collection": collection, "reason": reason},
        )
        self.collection = collection
