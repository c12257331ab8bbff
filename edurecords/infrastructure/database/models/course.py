# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Course catalog model."""

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from edurecords.infrastructure.database.models.base import Base, IdMixin, TimestampMixin


class Course(IdMixin, TimestampMixin, Base):
    """Catalog course.

    ``active_enrollment_count`` is the admission counter. It is only moved
    by conditional UPDATE statements so that admission against
    ``max_enrollment`` is a single atomic decision.
    """

    __tablename__ = "courses"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="ck_courses_credits_nonneg"),
        CheckConstraint(
            "active_enrollment_count >= 0",
            name="ck_courses_active_count_nonneg",
        ),
    )

    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    credits: Mapped[int] = mapped_column(Integer, nullable=False)
    semester: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    skills: Mapped[list[str]] = mapped_column(nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    max_enrollment: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    active_enrollment_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
