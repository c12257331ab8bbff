# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade service for grade submission and revision.

This module provides the GradeService class for:
- Submitting a grade for an enrolled student
- Revising marks and remarks
- Listing grades by student or course

Letter grade and grade point are always derived from marks through the
grading scale. Final grades are written into the transcript in the same
commit as the grade itself.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.domains.ledger.courses import CourseFactProvider, DatabaseCourseFactProvider
from edurecords.domains.ledger.errors import (
    GradeNotFoundError,
    InvalidAssessmentTypeError,
    LedgerError,
    NotEnrolledError,
)
from edurecords.domains.ledger.grading import GradingScale, get_grading_scale
from edurecords.domains.ledger.transcript import TranscriptSynchronizer
from edurecords.infrastructure.database.models import Enrollment, Grade
from edurecords.models.grade import GradeListResponse, GradeResponse

logger = logging.getLogger(__name__)

ASSESSMENT_TYPES: tuple[str, ...] = (
    "final",
    "midterm",
    "quiz",
    "assignment",
    "project",
    "practical",
)

FINAL_ASSESSMENT = "final"


class GradeService:
    """Service for grade operations.

    Attributes:
        db: Async database session.
        courses: Course fact provider.
        scale: Grading scale.
    """

    def __init__(
        self,
        db: AsyncSession,
        courses: CourseFactProvider | None = None,
        synchronizer: TranscriptSynchronizer | None = None,
        scale: GradingScale | None = None,
    ) -> None:
        """Initialize grade service.

        Args:
            db: Async database session.
            courses: Course fact provider; defaults to the database catalog.
            synchronizer: Transcript synchronizer; created on first use.
            scale: Grading scale; defaults to the configured scale.
        """
        self.db = db
        self.courses = courses or DatabaseCourseFactProvider(db)
        self.scale = scale or get_grading_scale()
        self._synchronizer = synchronizer

    @property
    def synchronizer(self) -> TranscriptSynchronizer:
        """Transcript synchronizer bound to this session."""
        if self._synchronizer is None:
            self._synchronizer = TranscriptSynchronizer(self.db, scale=self.scale)
        return self._synchronizer

    async def submit_grade(
        self,
        student_id: str,
        course_id: str,
        marks: float,
        assessment_type: str = FINAL_ASSESSMENT,
        grader_id: str | None = None,
        remarks: str | None = None,
    ) -> GradeResponse:
        """Record a grade for an enrolled student.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.
            marks: Marks obtained, 0-100.
            assessment_type: One of ASSESSMENT_TYPES.
            grader_id: Identifier of the grading faculty member.
            remarks: Optional grader remarks.

        Returns:
            The created grade.

        Raises:
            InvalidAssessmentTypeError: If the assessment type is unknown.
            InvalidMarksError: If marks are outside 0-100.
            NotEnrolledError: If no active or completed enrollment exists.
        """
        if assessment_type not in ASSESSMENT_TYPES:
            raise InvalidAssessmentTypeError(
                f"Unknown assessment type '{assessment_type}', "
                f"expected one of {', '.join(ASSESSMENT_TYPES)}"
            )

        derived = self.scale.derive(marks)
        enrollment = await self._get_gradable_enrollment(student_id, course_id)

        grade = Grade(
            student_id=str(student_id),
            course_id=str(course_id),
            enrollment_id=enrollment.id,
            graded_by=str(grader_id) if grader_id is not None else None,
            marks_obtained=float(marks),
            assessment_type=assessment_type,
            letter_grade=derived.letter_grade,
            grade_point=derived.grade_point,
            remarks=remarks,
        )

        try:
            self.db.add(grade)
            await self.db.flush()

            if grade.is_final:
                await self._synchronize(grade)

            await self.db.commit()
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        await self.db.refresh(grade)

        logger.info(
            "Grade submitted: student=%s, course=%s, type=%s, grade=%s, by=%s",
            student_id,
            course_id,
            assessment_type,
            derived.letter_grade,
            grader_id,
        )

        return GradeResponse.model_validate(grade)

    async def revise_grade(
        self,
        grade_id: str,
        marks: float | None = None,
        remarks: str | None = None,
    ) -> GradeResponse:
        """Revise a grade's marks and/or remarks.

        Changing the marks of a final grade re-synchronizes the transcript,
        replacing the course's entry in place.

        Args:
            grade_id: Grade identifier.
            marks: New marks, 0-100.
            remarks: New remarks.

        Returns:
            The revised grade.

        Raises:
            GradeNotFoundError: If the grade does not exist.
            InvalidMarksError: If marks are outside 0-100.
        """
        derived = self.scale.derive(marks) if marks is not None else None
        grade = await self._get_grade(grade_id)

        try:
            if derived is not None:
                grade.marks_obtained = float(marks)
                grade.letter_grade = derived.letter_grade
                grade.grade_point = derived.grade_point
            if remarks is not None:
                grade.remarks = remarks

            await self.db.flush()

            if derived is not None and grade.is_final:
                await self._synchronize(grade)

            await self.db.commit()
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        await self.db.refresh(grade)

        logger.info(
            "Grade revised: grade=%s, marks=%s, letter=%s",
            grade_id,
            grade.marks_obtained,
            grade.letter_grade,
        )

        return GradeResponse.model_validate(grade)

    async def list_grades_for_student(self, student_id: str) -> GradeListResponse:
        """List a student's grades, newest first."""
        result = await self.db.execute(
            select(Grade)
            .where(Grade.student_id == str(student_id))
            .order_by(Grade.created_at.desc())
        )
        grades = result.scalars().all()

        return GradeListResponse(
            items=[GradeResponse.model_validate(g) for g in grades],
            total=len(grades),
        )

    async def list_grades_for_course(self, course_id: str) -> GradeListResponse:
        """List a course's grades, newest first."""
        result = await self.db.execute(
            select(Grade)
            .where(Grade.course_id == str(course_id))
            .order_by(Grade.created_at.desc())
        )
        grades = result.scalars().all()

        return GradeListResponse(
            items=[GradeResponse.model_validate(g) for g in grades],
            total=len(grades),
        )

    async def _synchronize(self, grade: Grade) -> None:
        course = await self.courses.get_course(grade.course_id, active_only=False)
        await self.synchronizer.synchronize(grade.student_id, course, grade.marks_obtained)

    async def _get_gradable_enrollment(self, student_id: str, course_id: str) -> Enrollment:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.student_id == str(student_id),
                Enrollment.course_id == str(course_id),
            )
        )
        enrollment = result.scalar_one_or_none()

        if enrollment is None or enrollment.status == "dropped":
            raise NotEnrolledError(f"Student {student_id} is not enrolled in course {course_id}")

        return enrollment

    async def _get_grade(self, grade_id: str) -> Grade:
        grade = await self.db.get(Grade, str(grade_id))
        if grade is None:
            raise GradeNotFoundError(f"Grade {grade_id} not found")
        return grade
