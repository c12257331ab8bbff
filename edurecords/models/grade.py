# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade request and response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class GradeCreateRequest(BaseModel):
    """Request to assign a grade."""

    student_id: UUID
    course_id: UUID
    marks_obtained: float
    assessment_type: str = "final"
    remarks: str | None = None


class GradeUpdateRequest(BaseModel):
    """Request to revise a grade's marks and/or remarks."""

    marks_obtained: float | None = None
    remarks: str | None = None


class GradeResponse(BaseModel):
    """Grade with derived letter grade and grade point."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_id: str
    enrollment_id: str
    graded_by: str | None = None
    marks_obtained: float
    assessment_type: str
    letter_grade: str
    grade_point: float
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime


class GradeListResponse(BaseModel):
    """List of grades."""

    items: list[GradeResponse]
    total: int
