# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment and grade models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from edurecords.infrastructure.database.models.base import Base, IdMixin, TimestampMixin
from edurecords.utils.datetime import utc_now


class Enrollment(IdMixin, TimestampMixin, Base):
    """A student's enrollment in a course.

    Status moves active -> completed or active -> dropped. Dropped rows are
    kept; ``credits_awarded`` is written once, on completion.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="uq_enrollments_student_course"),
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_enrollments_progress_range",
        ),
    )

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    progress_percentage: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_modules: Mapped[list[str]] = mapped_column(nullable=False, default=list)
    credits_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    dropped_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_active(self) -> bool:
        """Check if the enrollment still accepts progress."""
        return self.status == "active"


class Grade(IdMixin, TimestampMixin, Base):
    """An assessment score for an enrolled student.

    ``letter_grade`` and ``grade_point`` are derived from ``marks_obtained``
    and are rewritten together with it.
    """

    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint(
            "marks_obtained >= 0 AND marks_obtained <= 100",
            name="ck_grades_marks_range",
        ),
    )

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    enrollment_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("enrollments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    graded_by: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    marks_obtained: Mapped[float] = mapped_column(Float, nullable=False)
    assessment_type: Mapped[str] = mapped_column(String(20), nullable=False, default="final")
    letter_grade: Mapped[str] = mapped_column(String(4), nullable=False)
    grade_point: Mapped[float] = mapped_column(Float, nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def is_final(self) -> bool:
        """Check if this grade feeds the transcript."""
        return self.assessment_type == "final"
