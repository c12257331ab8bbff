# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment service for the course enrollment lifecycle.

This module provides the EnrollmentService class for:
- Enrollment with atomic capacity admission
- Progress events, including completion into the transcript
- Dropping an enrollment
- Student and course enrollment listings

Status moves active -> completed or active -> dropped; both are terminal.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.domains.ledger.courses import (
    CourseFactProvider,
    CourseFacts,
    DatabaseCourseFactProvider,
)
from edurecords.domains.ledger.errors import (
    AlreadyEnrolledError,
    CourseFullError,
    EnrollmentNotFoundError,
    InvalidProgressError,
    LedgerError,
    NotEnrollmentOwnerError,
    StudentNotFoundError,
)
from edurecords.domains.ledger.transcript import TranscriptSynchronizer, find_latest_final_marks
from edurecords.infrastructure.database.models import Course, Enrollment, User
from edurecords.models.enrollment import EnrollmentListResponse, EnrollmentResponse
from edurecords.utils.datetime import utc_now

logger = logging.getLogger(__name__)

COMPLETE_PERCENTAGE = 100


class EnrollmentService:
    """Service for the enrollment lifecycle.

    Each public mutation commits once at the end and rolls the whole session
    back on any ledger or database error.

    Attributes:
        db: Async database session.
        courses: Course fact provider.
    """

    def __init__(
        self,
        db: AsyncSession,
        courses: CourseFactProvider | None = None,
        synchronizer: TranscriptSynchronizer | None = None,
    ) -> None:
        """Initialize enrollment service.

        Args:
            db: Async database session.
            courses: Course fact provider; defaults to the database catalog.
            synchronizer: Transcript synchronizer; created on first use.
        """
        self.db = db
        self.courses = courses or DatabaseCourseFactProvider(db)
        self._synchronizer = synchronizer

    @property
    def synchronizer(self) -> TranscriptSynchronizer:
        """Transcript synchronizer bound to this session."""
        if self._synchronizer is None:
            self._synchronizer = TranscriptSynchronizer(self.db)
        return self._synchronizer

    async def enroll(self, student_id: str, course_id: str) -> EnrollmentResponse:
        """Enroll a student in a course.

        Args:
            student_id: Student identifier.
            course_id: Course identifier.

        Returns:
            The new active enrollment.

        Raises:
            CourseNotFoundError: If the course is missing or inactive.
            StudentNotFoundError: If the student does not exist.
            AlreadyEnrolledError: If an enrollment for the pair exists.
            CourseFullError: If the course reached its cap.
        """
        course = await self.courses.get_course(course_id)
        await self._get_student(student_id)

        existing = await self._find_enrollment(student_id, course.id)
        if existing is not None:
            raise AlreadyEnrolledError(
                f"Student {student_id} already has a {existing.status} enrollment in {course.code}"
            )

        enrollment = Enrollment(
            student_id=str(student_id),
            course_id=course.id,
            status="active",
            progress_percentage=0,
            completed_modules=[],
            credits_awarded=0,
            enrolled_at=utc_now(),
        )

        try:
            await self._claim_seat(course)
            self.db.add(enrollment)
            await self.db.flush()
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise AlreadyEnrolledError(
                f"Student {student_id} is already enrolled in {course.code}"
            ) from e
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        await self.db.refresh(enrollment)

        logger.info("Enrolled student: student=%s, course=%s", student_id, course.code)

        return EnrollmentResponse.model_validate(enrollment)

    async def update_progress(
        self,
        enrollment_id: str,
        caller_id: str,
        percentage: int,
        completed_modules: Sequence[str] | None = None,
    ) -> EnrollmentResponse:
        """Apply a progress event.

        Reaching 100% completes the enrollment, awards the course credits
        once and writes the course into the transcript in the same commit.
        If a final grade already exists its latest marks are used for the
        transcript entry; otherwise the entry is an ungraded completion.

        Args:
            enrollment_id: Enrollment identifier.
            caller_id: Identifier of the acting student.
            percentage: New progress percentage, 0-100.
            completed_modules: Completed module identifiers, if reported.

        Returns:
            Updated enrollment.

        Raises:
            InvalidProgressError: If percentage is outside 0-100.
            EnrollmentNotFoundError: If missing or no longer active.
            NotEnrollmentOwnerError: If the caller does not own it.
        """
        if isinstance(percentage, bool) or not isinstance(percentage, int):
            raise InvalidProgressError(f"Progress must be an integer, got {percentage!r}")
        if not 0 <= percentage <= COMPLETE_PERCENTAGE:
            raise InvalidProgressError(f"Progress must be between 0 and 100, got {percentage}")

        enrollment = await self._get_active_enrollment(enrollment_id)
        self._check_owner(enrollment, caller_id)

        try:
            enrollment.progress_percentage = percentage
            if completed_modules is not None:
                enrollment.completed_modules = list(completed_modules)

            if percentage == COMPLETE_PERCENTAGE:
                await self._complete(enrollment)

            await self.db.commit()
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        await self.db.refresh(enrollment)

        logger.info(
            "Progress updated: enrollment=%s, progress=%d, status=%s",
            enrollment_id,
            percentage,
            enrollment.status,
        )

        return EnrollmentResponse.model_validate(enrollment)

    async def drop_enrollment(self, enrollment_id: str, caller_id: str) -> None:
        """Drop an active enrollment.

        Dropping frees the seat and never touches the transcript, credits
        or skills.

        Args:
            enrollment_id: Enrollment identifier.
            caller_id: Identifier of the acting student.

        Raises:
            EnrollmentNotFoundError: If missing or no longer active.
            NotEnrollmentOwnerError: If the caller does not own it.
        """
        enrollment = await self._get_active_enrollment(enrollment_id)
        self._check_owner(enrollment, caller_id)

        try:
            enrollment.status = "dropped"
            enrollment.dropped_at = utc_now()
            await self._release_seat(enrollment.course_id)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

        logger.info("Dropped enrollment: enrollment=%s, student=%s", enrollment_id, caller_id)

    async def list_student_enrollments(self, student_id: str) -> EnrollmentListResponse:
        """List a student's enrollments, newest first."""
        result = await self.db.execute(
            select(Enrollment)
            .where(Enrollment.student_id == str(student_id))
            .order_by(Enrollment.enrolled_at.desc())
        )
        enrollments = result.scalars().all()

        return EnrollmentListResponse(
            items=[EnrollmentResponse.model_validate(e) for e in enrollments],
            total=len(enrollments),
        )

    async def list_course_enrollments(self, course_id: str) -> EnrollmentListResponse:
        """List a course's enrollments, oldest first."""
        result = await self.db.execute(
            select(Enrollment)
            .where(Enrollment.course_id == str(course_id))
            .order_by(Enrollment.enrolled_at.asc())
        )
        enrollments = result.scalars().all()

        return EnrollmentListResponse(
            items=[EnrollmentResponse.model_validate(e) for e in enrollments],
            total=len(enrollments),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _complete(self, enrollment: Enrollment) -> None:
        """Transition to completed and synchronize the transcript."""
        course = await self.courses.get_course(enrollment.course_id, active_only=False)

        enrollment.status = "completed"
        enrollment.completed_at = utc_now()
        enrollment.credits_awarded = course.credits
        await self._release_seat(course.id)

        marks = await find_latest_final_marks(self.db, enrollment.id)
        await self.synchronizer.synchronize(
            enrollment.student_id, course, marks, completed_at=enrollment.completed_at
        )

        logger.info(
            "Enrollment completed: enrollment=%s, course=%s, credits=%d, graded=%s",
            enrollment.id,
            course.code,
            course.credits,
            marks is not None,
        )

    async def _claim_seat(self, course: CourseFacts) -> None:
        """Atomically take one seat, or raise CourseFullError."""
        result = await self.db.execute(
            update(Course)
            .where(
                Course.id == course.id,
                Course.is_active.is_(True),
                Course.active_enrollment_count < Course.max_enrollment,
            )
            .values(active_enrollment_count=Course.active_enrollment_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise CourseFullError(
                f"Course {course.code} reached its enrollment cap of {course.max_enrollment}"
            )

    async def _release_seat(self, course_id: str) -> None:
        await self.db.execute(
            update(Course)
            .where(Course.id == str(course_id), Course.active_enrollment_count > 0)
            .values(active_enrollment_count=Course.active_enrollment_count - 1)
            .execution_options(synchronize_session=False)
        )

    async def _get_student(self, student_id: str) -> User:
        student = await self.db.get(User, str(student_id))
        if student is None or not student.is_student:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return student

    async def _find_enrollment(self, student_id: str, course_id: str) -> Enrollment | None:
        result = await self.db.execute(
            select(Enrollment).where(
                Enrollment.student_id == str(student_id),
                Enrollment.course_id == str(course_id),
            )
        )
        return result.scalar_one_or_none()

    async def _get_active_enrollment(self, enrollment_id: str) -> Enrollment:
        """Lock and load an enrollment that still accepts events."""
        result = await self.db.execute(
            select(Enrollment).where(Enrollment.id == str(enrollment_id)).with_for_update()
        )
        enrollment = result.scalar_one_or_none()

        if enrollment is None or not enrollment.is_active:
            raise EnrollmentNotFoundError(f"Active enrollment {enrollment_id} not found")

        return enrollment

    @staticmethod
    def _check_owner(enrollment: Enrollment, caller_id: str) -> None:
        if enrollment.student_id != str(caller_id):
            raise NotEnrollmentOwnerError("Enrollment belongs to another student")
