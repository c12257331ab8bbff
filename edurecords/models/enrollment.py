# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment request and response models."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

EnrollmentStatus = Literal["active", "completed", "dropped"]


class EnrollRequest(BaseModel):
    """Request to enroll in a course.

    ``student_id`` is only honoured for administrators; students always
    enroll themselves.
    """

    course_id: UUID
    student_id: UUID | None = None


class ProgressUpdateRequest(BaseModel):
    """Progress event for an enrollment.

    Range checking is done by the ledger so that out-of-range values surface
    as ``invalid_argument`` like every other ledger error. Omitting
    ``completed_modules`` keeps the stored module set.
    """

    progress_percentage: int
    completed_modules: list[str] | None = None


class EnrollmentResponse(BaseModel):
    """Enrollment state."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    status: EnrollmentStatus
    progress_percentage: int
    completed_modules: list[str] = Field(default_factory=list)
    credits_awarded: int
    enrolled_at: datetime
    completed_at: datetime | None = None
    dropped_at: datetime | None = None


class EnrollmentListResponse(BaseModel):
    """List of enrollments."""

    items: list[EnrollmentResponse]
    total: int
