# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Transcript synchronization.

Final-grade submission, grade revision and progress completion all call
``TranscriptSynchronizer.synchronize``. A record holds at most one entry per
course: the first synchronization appends it, later ones overwrite its
fields in place and keep its position. After the entry is written the record
is settled: CGPA, credit totals, skills and the user's credit cache are all
re-derived from the full transcript inside the same ledger unit.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.core.config import get_settings
from edurecords.domains.ledger.cgpa import recalculate_cgpa
from edurecords.domains.ledger.courses import CourseFacts
from edurecords.domains.ledger.credits import settle_credits
from edurecords.domains.ledger.grading import GradingScale, get_grading_scale
from edurecords.domains.ledger.unit import run_ledger_unit
from edurecords.infrastructure.database.models import (
    AcademicRecord,
    Grade,
    TranscriptEntry,
    User,
)
from edurecords.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from edurecords.core.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryFields:
    """Snapshot written into a transcript entry."""

    course_id: str
    course_name: str
    course_code: str
    credits: int
    semester: Optional[int]
    skill_tags: list[str] = field(default_factory=list)
    marks_obtained: Optional[float] = None
    letter_grade: Optional[str] = None
    grade_point: Optional[float] = None


def build_entry_fields(
    course: CourseFacts,
    marks: float | None,
    scale: GradingScale,
) -> EntryFields:
    """Build entry fields from course facts and optional final marks.

    Raises:
        InvalidMarksError: If marks are out of range.
    """
    letter_grade = None
    grade_point = None
    marks_value = None

    if marks is not None:
        derived = scale.derive(marks)
        marks_value = float(marks)
        letter_grade = derived.letter_grade
        grade_point = derived.grade_point

    return EntryFields(
        course_id=str(course.id),
        course_name=course.name,
        course_code=course.code,
        credits=course.credits,
        semester=course.semester,
        skill_tags=list(course.skills),
        marks_obtained=marks_value,
        letter_grade=letter_grade,
        grade_point=grade_point,
    )


def upsert_transcript_entry(
    record: AcademicRecord,
    fields: EntryFields,
    completed_at: datetime | None = None,
) -> TranscriptEntry:
    """Append or overwrite the record's entry for a course.

    ``completed_at`` only moves when the entry's content changes, so repeated
    synchronization with the same inputs leaves the record untouched.

    Args:
        record: Academic record (loaded with its transcript).
        fields: New entry contents.
        completed_at: Completion timestamp; defaults to now.

    Returns:
        The appended or updated entry.
    """
    timestamp = ensure_utc(completed_at) or utc_now()
    values = asdict(fields)
    entry = record.find_entry(fields.course_id)

    if entry is None:
        position = max((e.position for e in record.course_records), default=-1) + 1
        entry = TranscriptEntry(
            record_id=record.id,
            position=position,
            completed_at=timestamp,
            **values,
        )
        record.course_records.append(entry)
        logger.debug("Appended transcript entry: record=%s, course=%s", record.id, fields.course_id)
        return entry

    changed = False
    for name, value in values.items():
        if getattr(entry, name) != value:
            setattr(entry, name, value)
            changed = True

    if changed:
        entry.completed_at = timestamp
        logger.debug("Replaced transcript entry: record=%s, course=%s", record.id, fields.course_id)

    return entry


def settle_record(
    record: AcademicRecord,
    student: User | None,
    pass_grade_point: float,
) -> None:
    """Re-derive CGPA, credit totals, skills and the user credit cache."""
    recalculate_cgpa(record)
    settle_credits(record, student, pass_grade_point)


async def find_latest_final_marks(db: AsyncSession, enrollment_id: str) -> float | None:
    """Get marks of the most recent final grade for an enrollment.

    Args:
        db: Async database session.
        enrollment_id: Enrollment identifier.

    Returns:
        Marks, or None when no final grade exists.
    """
    stmt = (
        select(Grade.marks_obtained)
        .where(
            Grade.enrollment_id == str(enrollment_id),
            Grade.assessment_type == "final",
        )
        .order_by(Grade.updated_at.desc(), Grade.created_at.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


class TranscriptSynchronizer:
    """Writes course outcomes into a student's academic record.

    Attributes:
        db: Async database session.
        settings: Application settings.
        scale: Grading scale used to derive entry grades.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional["Settings"] = None,
        scale: GradingScale | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.scale = scale or get_grading_scale()

    async def synchronize(
        self,
        student_id: str,
        course: CourseFacts,
        marks: float | None,
        completed_at: datetime | None = None,
    ) -> AcademicRecord:
        """Upsert the course's entry and settle the record.

        Args:
            student_id: Student identifier.
            course: Course facts to snapshot.
            marks: Final marks, or None for an ungraded completion.
            completed_at: When the course was completed; defaults to now.

        Returns:
            The settled academic record.

        Raises:
            InvalidMarksError: If marks are out of range.
            RecordNotFoundError: If the student has no record.
            LedgerInconsistentError: If the version check keeps failing.
        """
        fields = build_entry_fields(course, marks, self.scale)
        student = await self.db.get(User, str(student_id))
        pass_grade_point = self.settings.ledger.pass_grade_point

        async def apply(record: AcademicRecord) -> AcademicRecord:
            upsert_transcript_entry(record, fields, completed_at)
            settle_record(record, student, pass_grade_point)
            return record

        record = await run_ledger_unit(
            self.db,
            apply,
            student_id=str(student_id),
            max_attempts=self.settings.ledger.max_sync_attempts,
        )

        logger.info(
            "Synchronized transcript: student=%s, course=%s, grade=%s, cgpa=%.2f, earned=%d",
            student_id,
            course.code,
            fields.letter_grade or "ungraded",
            record.cgpa,
            record.total_credits_earned,
        )
        return record
