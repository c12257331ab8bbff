# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Academic record service."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from edurecords.domains.academic_record.service import AcademicRecordService
from edurecords.domains.ledger.errors import (
    ExitLevelRegressionError,
    RecordNotFoundError,
    StudentNotFoundError,
)
from edurecords.infrastructure.database.models import ExitQualification
from edurecords.models.academic_record import AcademicRecordResponse
from edurecords.utils.datetime import utc_now


def _assign_id(obj) -> None:
    if obj.id is None:
        obj.id = str(uuid4())


@pytest.fixture
def record_service(mock_db, settings):
    """Create academic record service with mock database."""
    mock_db.refresh.side_effect = _assign_id
    return AcademicRecordService(db=mock_db, settings=settings)


class TestOpenRecord:
    """Tests for open_record."""

    @pytest.mark.asyncio
    async def test_returns_existing_record(
        self, record_service, mock_db, record, scalar_result
    ) -> None:
        """Test opening twice returns the same record."""
        mock_db.execute.return_value = scalar_result(record)

        result = await record_service.open_record(record.student_id)

        assert result.id == record.id
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_empty_record(
        self, record_service, mock_db, student, scalar_result
    ) -> None:
        """Test a new record starts empty."""
        mock_db.execute.return_value = scalar_result(None)
        mock_db.get.return_value = student

        result = await record_service.open_record(student.id)

        assert isinstance(result, AcademicRecordResponse)
        assert result.student_id == student.id
        assert result.course_records == []
        assert result.cgpa == 0.0
        assert result.total_credits_earned == 0
        assert result.current_level is None
        assert result.is_verified is False
        mock_db.add.assert_called_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_open_returns_winner(
        self, record_service, mock_db, student, record, scalar_result
    ) -> None:
        """Test a lost insert race returns the record that won."""
        mock_db.execute.side_effect = [scalar_result(None), scalar_result(record)]
        mock_db.get.return_value = student
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("duplicate"))

        result = await record_service.open_record(student.id)

        assert result.id == record.id
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_student(self, record_service, mock_db, scalar_result) -> None:
        """Test opening a record for a missing student."""
        mock_db.execute.return_value = scalar_result(None)
        mock_db.get.return_value = None

        with pytest.raises(StudentNotFoundError):
            await record_service.open_record(str(uuid4()))


class TestGetTranscript:
    """Tests for get_transcript."""

    @pytest.mark.asyncio
    async def test_returns_entries_in_order(
        self, record_service, mock_db, record, make_entry, scalar_result
    ) -> None:
        """Test the transcript keeps completion order."""
        record.course_records = [
            make_entry(credits=4, grade_point=10.0, position=0, letter_grade="A", marks=92),
            make_entry(credits=2, grade_point=None, position=1),
        ]
        mock_db.execute.return_value = scalar_result(record)

        result = await record_service.get_transcript(record.student_id)

        assert [e.position for e in record.course_records] == [0, 1]
        assert result.course_records[0].letter_grade == "A"
        assert result.course_records[1].grade_point is None

    @pytest.mark.asyncio
    async def test_missing_record(self, record_service, mock_db, scalar_result) -> None:
        """Test a student without a record."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(RecordNotFoundError):
            await record_service.get_transcript(str(uuid4()))


class TestVerifyRecord:
    """Tests for verify_record."""

    @pytest.mark.asyncio
    async def test_verify(self, record_service, mock_db, record, scalar_result) -> None:
        """Test verification is stamped and committed."""
        mock_db.execute.return_value = scalar_result(record)
        admin_id = str(uuid4())

        result = await record_service.verify_record(record.id, admin_id)

        assert result.is_verified is True
        assert result.verified_by == admin_id
        assert result.verified_at is not None
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_verify_missing(self, record_service, mock_db, scalar_result) -> None:
        """Test verifying an unknown record rolls back."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(RecordNotFoundError):
            await record_service.verify_record(str(uuid4()), str(uuid4()))

        mock_db.rollback.assert_awaited_once()


class TestRecordExit:
    """Tests for record_exit through the service."""

    @pytest.mark.asyncio
    async def test_commits_qualification(self, mock_db, settings) -> None:
        """Test the tracker result is committed and returned."""
        exits = AsyncMock()
        exits.record_exit.return_value = ExitQualification(
            level="diploma", awarded_at=utc_now(), total_credits=80, position=0
        )
        service = AcademicRecordService(db=mock_db, settings=settings, exits=exits)

        result = await service.record_exit("record-1", "diploma", recorded_by="admin-1")

        assert result.level == "diploma"
        assert result.total_credits == 80
        exits.record_exit.assert_awaited_once_with(
            "record-1", "diploma", total_credits=None, recorded_by="admin-1"
        )
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_rejection_rolls_back(self, mock_db, settings) -> None:
        """Test a refused exit leaves nothing committed."""
        exits = AsyncMock()
        exits.record_exit.side_effect = ExitLevelRegressionError("below current level")
        service = AcademicRecordService(db=mock_db, settings=settings, exits=exits)

        with pytest.raises(ExitLevelRegressionError):
            await service.record_exit("record-1", "certificate")

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_called()


class TestReconcile:
    """Tests for reconcile."""

    @pytest.mark.asyncio
    async def test_repairs_divergent_fields(
        self, record_service, mock_db, record, student, make_entry, scalar_result
    ) -> None:
        """Test stale derived fields are reported and rewritten."""
        record.course_records = [
            make_entry(credits=4, grade_point=10.0, skill_tags=["python"]),
            make_entry(credits=2, grade_point=0.0, skill_tags=["sql"], position=1),
        ]
        record.cgpa = 9.5
        record.total_credits_attempted = 6
        record.total_credits_earned = 6
        record.skills_acquired = ["python", "sql"]
        record.current_level = "certificate"
        student.credits_earned = 2
        student.academic_level = None
        mock_db.execute.return_value = scalar_result(record)
        mock_db.get.return_value = student

        report = await record_service.reconcile(student.id)

        assert report.is_consistent is False
        diverged = {d.field: (d.stored, d.derived) for d in report.divergences}
        assert diverged == {
            "cgpa": (9.5, 6.67),
            "total_credits_earned": (6, 4),
            "user.credits_earned": (2, 4),
            "user.academic_level": (None, "certificate"),
        }
        assert record.cgpa == 6.67
        assert record.total_credits_earned == 4
        assert student.credits_earned == 4
        assert student.academic_level == "certificate"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_consistent_record(
        self, record_service, mock_db, record, student, make_entry, scalar_result
    ) -> None:
        """Test a settled record reports no divergence."""
        record.course_records = [make_entry(credits=4, grade_point=9.0, skill_tags=["git"])]
        record.cgpa = 9.0
        record.total_credits_attempted = 4
        record.total_credits_earned = 4
        record.skills_acquired = ["git"]
        student.credits_earned = 4
        mock_db.execute.return_value = scalar_result(record)
        mock_db.get.return_value = student

        report = await record_service.reconcile(student.id)

        assert report.is_consistent is True
        assert report.divergences == []
        assert report.record_id == record.id

    @pytest.mark.asyncio
    async def test_missing_record(self, record_service, mock_db, student, scalar_result) -> None:
        """Test reconciling a student without a record."""
        mock_db.execute.return_value = scalar_result(None)
        mock_db.get.return_value = student

        with pytest.raises(RecordNotFoundError):
            await record_service.reconcile(student.id)

        mock_db.rollback.assert_awaited_once()
