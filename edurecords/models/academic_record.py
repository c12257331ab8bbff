# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic record (transcript, credits, NEP exits) models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ExitLevel = Literal["certificate", "diploma", "degree", "postgraduate"]


class TranscriptEntryResponse(BaseModel):
    """One course outcome on a transcript."""

    model_config = ConfigDict(from_attributes=True)

    course_id: str
    course_name: str
    course_code: str
    credits: int
    semester: int | None = None
    skill_tags: list[str] = Field(default_factory=list)
    marks_obtained: float | None = None
    letter_grade: str | None = None
    grade_point: float | None = None
    completed_at: datetime


class ExitQualificationResponse(BaseModel):
    """An NEP exit award."""

    model_config = ConfigDict(from_attributes=True)

    level: str
    awarded_at: datetime
    total_credits: int
    recorded_by: str | None = None


class AcademicRecordResponse(BaseModel):
    """Full academic record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    course_records: list[TranscriptEntryResponse] = Field(default_factory=list)
    total_credits_attempted: int
    total_credits_earned: int
    skills_acquired: list[str] = Field(default_factory=list)
    cgpa: float
    current_level: str | None = None
    exit_qualifications: list[ExitQualificationResponse] = Field(default_factory=list)
    is_verified: bool
    verified_by: str | None = None
    verified_at: datetime | None = None
    last_synced_at: datetime | None = None


class RecordExitRequest(BaseModel):
    """Request to record an NEP exit.

    ``level`` is validated by the ledger, not here, so unknown levels are
    reported as ``invalid_argument``.
    """

    level: str
    total_credits: int | None = Field(default=None, ge=0)


class FieldDivergence(BaseModel):
    """A stored value that differed from its derived value."""

    field: str
    stored: Any
    derived: Any


class ReconciliationReport(BaseModel):
    """Outcome of re-deriving a record from its transcript."""

    student_id: str
    record_id: str
    is_consistent: bool
    divergences: list[FieldDivergence] = Field(default_factory=list)
    reconciled_at: datetime
