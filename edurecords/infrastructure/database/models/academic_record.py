# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic record (transcript, credit ledger, NEP exits) models.

One AcademicRecord exists per student. Its ``version`` column is the
optimistic-concurrency token: the ORM adds ``WHERE version = :old`` to every
UPDATE and raises ``StaleDataError`` when another writer got there first.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edurecords.infrastructure.database.models.base import Base, IdMixin, TimestampMixin
from edurecords.utils.datetime import utc_now


class TranscriptEntry(IdMixin, Base):
    """One course's outcome on a student's transcript.

    Course facts are snapshotted at synchronization time. An entry created by
    progress completion before any final grade has no marks, letter grade or
    grade point.
    """

    __tablename__ = "transcript_entries"
    __table_args__ = (
        UniqueConstraint("record_id", "course_id", name="uq_transcript_entries_record_course"),
    )

    record_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("academic_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    course_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("courses.id", ondelete="RESTRICT"),
        nullable=False,
    )
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_code: Mapped[str] = mapped_column(String(20), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    semester: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    skill_tags: Mapped[list[str]] = mapped_column(nullable=False, default=list)
    marks_obtained: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    letter_grade: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    grade_point: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    @property
    def is_graded(self) -> bool:
        """Check if the entry carries a final grade."""
        return self.grade_point is not None


class ExitQualification(IdMixin, Base):
    """An NEP exit award recorded on a student's record."""

    __tablename__ = "exit_qualifications"

    record_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("academic_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    level: Mapped[str] = mapped_column(String(20), nullable=False)
    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False)
    recorded_by: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )


class AcademicRecord(IdMixin, TimestampMixin, Base):
    """A student's digital academic record (Academic Bank of Credits).

    Totals, skills and CGPA are derived from ``course_records`` and are
    rewritten in full whenever the transcript changes.
    """

    __tablename__ = "academic_records"

    student_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    total_credits_attempted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_credits_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skills_acquired: Mapped[list[str]] = mapped_column(nullable=False, default=list)
    cgpa: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    current_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified_by: Mapped[Optional[str]] = mapped_column(
        Uuid(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    verified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_synced_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    course_records: Mapped[list[TranscriptEntry]] = relationship(
        order_by=TranscriptEntry.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    exit_qualifications: Mapped[list[ExitQualification]] = relationship(
        order_by=ExitQualification.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    def find_entry(self, course_id: str) -> TranscriptEntry | None:
        """Return the transcript entry for a course, if any."""
        for entry in self.course_records:
            if entry.course_id == course_id:
                return entry
        return None
