# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy models for the records database."""

from edurecords.infrastructure.database.models.academic_record import (
    AcademicRecord,
    ExitQualification,
    TranscriptEntry,
)
from edurecords.infrastructure.database.models.base import Base, IdMixin, TimestampMixin
from edurecords.infrastructure.database.models.course import Course
from edurecords.infrastructure.database.models.enrollment import Enrollment, Grade
from edurecords.infrastructure.database.models.user import User

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "User",
    "Course",
    "Enrollment",
    "Grade",
    "AcademicRecord",
    "TranscriptEntry",
    "ExitQualification",
]
