# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error taxonomy for the academic ledger.

Every ledger error carries a ``kind`` (one of ``LedgerErrorKind``) and a
human-readable message. The API layer maps kinds to HTTP statuses in one
place; services raise the most specific subclass.
"""

from enum import Enum
from typing import ClassVar


class LedgerErrorKind(str, Enum):
    """Machine-readable error categories."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    FORBIDDEN = "forbidden"
    INVALID_ARGUMENT = "invalid_argument"
    INCONSISTENT = "inconsistent"


class LedgerError(Exception):
    """Base exception for ledger operations.

    Attributes:
        kind: Error category.
        message: Human-readable error description.
    """

    kind: ClassVar[LedgerErrorKind] = LedgerErrorKind.INCONSISTENT

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# =============================================================================
# Categories
# =============================================================================


class NotFoundError(LedgerError):
    """A referenced entity does not exist."""

    kind = LedgerErrorKind.NOT_FOUND


class ConflictError(LedgerError):
    """Duplicate entity or concurrent-write version mismatch."""

    kind = LedgerErrorKind.CONFLICT


class CapacityExceededError(LedgerError):
    """A course has reached its enrollment cap."""

    kind = LedgerErrorKind.CAPACITY_EXCEEDED


class ForbiddenError(LedgerError):
    """Caller does not own the student resource."""

    kind = LedgerErrorKind.FORBIDDEN


class InvalidArgumentError(LedgerError):
    """Input outside its allowed range or enumeration."""

    kind = LedgerErrorKind.INVALID_ARGUMENT


class InconsistentError(LedgerError):
    """A multi-step ledger update could not be applied atomically."""

    kind = LedgerErrorKind.INCONSISTENT


# =============================================================================
# Concrete errors
# =============================================================================


class CourseNotFoundError(NotFoundError):
    """Raised when a course is missing or inactive."""


class StudentNotFoundError(NotFoundError):
    """Raised when a student account is missing."""


class EnrollmentNotFoundError(NotFoundError):
    """Raised when an enrollment is missing or no longer active."""


class NotEnrolledError(NotFoundError):
    """Raised when grading a student with no usable enrollment."""


class GradeNotFoundError(NotFoundError):
    """Raised when a grade is missing."""


class RecordNotFoundError(NotFoundError):
    """Raised when an academic record is missing."""


class AlreadyEnrolledError(ConflictError):
    """Raised when the (student, course) enrollment already exists."""


class CourseFullError(CapacityExceededError):
    """Raised when the course's active enrollments reached its cap."""


class NotEnrollmentOwnerError(ForbiddenError):
    """Raised when a student acts on someone else's enrollment."""


class InvalidMarksError(InvalidArgumentError):
    """Raised when marks fall outside 0-100."""


class InvalidProgressError(InvalidArgumentError):
    """Raised when a progress percentage falls outside 0-100."""


class InvalidAssessmentTypeError(InvalidArgumentError):
    """Raised for an unknown assessment type."""


class InvalidExitLevelError(InvalidArgumentError):
    """Raised for a level outside the NEP exit levels."""


class ExitLevelRegressionError(InvalidArgumentError):
    """Raised when an exit level lower than the current one is refused."""


class LedgerInconsistentError(InconsistentError):
    """Raised when retries are exhausted for a per-student ledger update."""
