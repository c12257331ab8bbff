# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests (mock sessions, transient ORM objects)
- Integration tests (FastAPI TestClient)
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from edurecords.core.config.settings import LedgerSettings, Settings
from edurecords.domains.ledger.courses import CourseFacts
from edurecords.infrastructure.database.models import (
    AcademicRecord,
    Enrollment,
    TranscriptEntry,
    User,
)
from edurecords.utils.datetime import utc_now


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide settings with default ledger policy."""
    return Settings(
        environment="development",
        ledger=LedgerSettings(
            pass_grade_point=5.0,
            exit_regression_policy="reject",
            max_sync_attempts=2,
        ),
    )


# =============================================================================
# Database Session
# =============================================================================


def _make_savepoint() -> AsyncMock:
    """Create an async context manager standing in for begin_nested()."""
    savepoint = AsyncMock()
    savepoint.__aenter__.return_value = savepoint
    savepoint.__aexit__.return_value = False
    return savepoint


def _scalar_result(value: Any) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _scalars_result(values: list[Any]) -> MagicMock:
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


def _rowcount_result(rowcount: int) -> MagicMock:
    result = MagicMock()
    result.rowcount = rowcount
    return result


@pytest.fixture
def scalar_result() -> Callable[[Any], MagicMock]:
    """Factory for execute() results returning one scalar."""
    return _scalar_result


@pytest.fixture
def scalars_result() -> Callable[[list[Any]], MagicMock]:
    """Factory for execute() results returning a list of scalars."""
    return _scalars_result


@pytest.fixture
def rowcount_result() -> Callable[[int], MagicMock]:
    """Factory for UPDATE results carrying a rowcount."""
    return _rowcount_result


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    db.get = AsyncMock()
    db.begin_nested = MagicMock(return_value=_make_savepoint())
    return db


# =============================================================================
# Domain Objects
# =============================================================================


@pytest.fixture
def student_id() -> str:
    """Provide a sample student ID for testing."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def student(student_id: str) -> User:
    """Create a transient student user."""
    return User(
        id=student_id,
        email="asha@example.edu",
        full_name="Asha Rao",
        role="student",
        credits_earned=0,
        academic_level=None,
        is_active=True,
    )


@pytest.fixture
def make_course() -> Callable[..., CourseFacts]:
    """Factory for course facts."""

    def _make(
        code: str = "CS101",
        credits: int = 4,
        skills: list[str] | None = None,
        max_enrollment: int = 60,
        semester: int | None = 1,
    ) -> CourseFacts:
        return CourseFacts(
            id=str(uuid4()),
            code=code,
            name=f"Course {code}",
            credits=credits,
            semester=semester,
            skills=skills if skills is not None else ["python"],
            is_active=True,
            max_enrollment=max_enrollment,
        )

    return _make


@pytest.fixture
def course(make_course: Callable[..., CourseFacts]) -> CourseFacts:
    """A 4-credit course."""
    return make_course()


@pytest.fixture
def make_entry() -> Callable[..., TranscriptEntry]:
    """Factory for transient transcript entries."""

    def _make(
        credits: int,
        grade_point: float | None,
        skill_tags: list[str] | None = None,
        position: int = 0,
        letter_grade: str | None = None,
        marks: float | None = None,
    ) -> TranscriptEntry:
        code = f"C{uuid4().hex[:5]}"
        return TranscriptEntry(
            id=str(uuid4()),
            position=position,
            course_id=str(uuid4()),
            course_name=f"Course {code}",
            course_code=code,
            credits=credits,
            semester=1,
            skill_tags=skill_tags or [],
            marks_obtained=marks,
            letter_grade=letter_grade,
            grade_point=grade_point,
            completed_at=utc_now(),
        )

    return _make


@pytest.fixture
def record(student_id: str) -> AcademicRecord:
    """Create an empty transient academic record."""
    return AcademicRecord(
        id=str(uuid4()),
        student_id=student_id,
        course_records=[],
        exit_qualifications=[],
        total_credits_attempted=0,
        total_credits_earned=0,
        skills_acquired=[],
        cgpa=0.0,
        current_level=None,
        is_verified=False,
        version=1,
    )


@pytest.fixture
def make_enrollment(student_id: str) -> Callable[..., Enrollment]:
    """Factory for transient enrollments."""

    def _make(
        course_id: str | None = None,
        status: str = "active",
        owner_id: str | None = None,
        progress: int = 0,
    ) -> Enrollment:
        return Enrollment(
            id=str(uuid4()),
            student_id=owner_id or student_id,
            course_id=course_id or str(uuid4()),
            status=status,
            progress_percentage=progress,
            completed_modules=[],
            credits_awarded=0,
            enrolled_at=utc_now(),
        )

    return _make
