# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course facts consumed by the ledger.

The catalog is owned elsewhere; the ledger only reads the facts it snapshots
into transcript entries and the flags it needs for admission.
"""

from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.domains.ledger.errors import CourseNotFoundError
from edurecords.infrastructure.database.models import Course


@dataclass(frozen=True)
class CourseFacts:
    """Read-only snapshot of a catalog course."""

    id: str
    code: str
    name: str
    credits: int
    semester: int | None = None
    skills: list[str] = field(default_factory=list)
    is_active: bool = True
    max_enrollment: int = 0

    @classmethod
    def from_model(cls, course: Course) -> "CourseFacts":
        """Build facts from a Course row."""
        return cls(
            id=str(course.id),
            code=course.code,
            name=course.name,
            credits=course.credits,
            semester=course.semester,
            skills=list(course.skills or []),
            is_active=course.is_active,
            max_enrollment=course.max_enrollment,
        )


class CourseFactProvider(Protocol):
    """Source of course facts."""

    async def get_course(self, course_id: str, *, active_only: bool = True) -> CourseFacts:
        """Return facts for a course or raise CourseNotFoundError."""
        ...


class DatabaseCourseFactProvider:
    """Course facts read from the records database.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_course(self, course_id: str, *, active_only: bool = True) -> CourseFacts:
        """Get a course's facts.

        Args:
            course_id: Course identifier.
            active_only: Treat inactive courses as missing. Completion of an
                existing enrollment passes False so a course retired
                mid-term can still be written to transcripts.

        Returns:
            CourseFacts snapshot.

        Raises:
            CourseNotFoundError: If the course is missing (or inactive).
        """
        result = await self.db.execute(select(Course).where(Course.id == str(course_id)))
        course = result.scalar_one_or_none()

        if course is None or (active_only and not course.is_active):
            raise CourseNotFoundError(f"Course {course_id} not found")

        return CourseFacts.from_model(course)
