from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    `code` is a machine-readable reason the UI can switch on, `details` holds
    extra structured fields merged into the error response.
    """

    status_code = 400
    code = "domain_error"

    def __init__(self, message: str = "", *, code: Optional[str] = None, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = dict(details or {})


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthorizationError(DomainError):
    """Raised when a teacher acts on a paper or section they are not assigned to."""

    status_code = 403
    code = "forbidden"


class NotFoundError(DomainError):
    status_code = 404
    code = "not_found"


class ConflictError(DomainError):
    """Raised when a uniqueness rule would be broken (duplicate record or slot)."""

    status_code = 409
    code = "conflict"


class HolidayError(ValidationError):
    code = "holiday"


class SemesterSetupRequiredError(ValidationError):
    """No active semester window is configured for the department/year."""

    code = "semester_setup"


class SemesterRangeError(ValidationError):
    """Semester windows exist but none of them covers the requested date."""

    code = "semester_range"
