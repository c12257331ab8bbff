# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User account model."""

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from edurecords.infrastructure.database.models.base import Base, IdMixin, TimestampMixin


class User(IdMixin, TimestampMixin, Base):
    """Platform account for an admin, faculty member or student.

    ``credits_earned`` and ``academic_level`` are caches of the student's
    AcademicRecord. The credit ledger is their only writer; the record is
    authoritative.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="student")
    student_number: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    credits_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    academic_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def is_student(self) -> bool:
        """Check if the account belongs to a student."""
        return self.role == "student"
