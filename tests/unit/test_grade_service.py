# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Grade service."""

from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from edurecords.domains.grade.service import GradeService
from edurecords.domains.ledger.errors import (
    GradeNotFoundError,
    InvalidAssessmentTypeError,
    InvalidMarksError,
    LedgerInconsistentError,
    NotEnrolledError,
)
from edurecords.domains.ledger.grading import DEFAULT_GRADING_SCALE
from edurecords.domains.ledger.transcript import TranscriptSynchronizer
from edurecords.infrastructure.database.models import Grade, User
from edurecords.utils.datetime import utc_now


def _refresh_grade(obj) -> None:
    now = utc_now()
    if obj.id is None:
        obj.id = str(uuid4())
    if obj.created_at is None:
        obj.created_at = now
    obj.updated_at = now


@pytest.fixture
def courses(course):
    """Course provider returning the sample course."""
    provider = AsyncMock()
    provider.get_course.return_value = course
    return provider


@pytest.fixture
def synchronizer():
    """Transcript synchronizer mock."""
    return AsyncMock()


@pytest.fixture
def grade_service(mock_db, courses, synchronizer):
    """Create grade service with mock database."""
    mock_db.refresh.side_effect = _refresh_grade
    return GradeService(
        db=mock_db,
        courses=courses,
        synchronizer=synchronizer,
        scale=DEFAULT_GRADING_SCALE,
    )


@pytest.fixture
def make_grade(student_id, course):
    """Factory for persisted-looking grades."""

    def _make(marks: float = 72.0, assessment_type: str = "final") -> Grade:
        derived = DEFAULT_GRADING_SCALE.derive(marks)
        return Grade(
            id=str(uuid4()),
            student_id=student_id,
            course_id=course.id,
            enrollment_id=str(uuid4()),
            marks_obtained=marks,
            assessment_type=assessment_type,
            letter_grade=derived.letter_grade,
            grade_point=derived.grade_point,
            created_at=utc_now(),
            updated_at=utc_now(),
        )

    return _make


class TestSubmitGrade:
    """Tests for submit_grade."""

    @pytest.mark.asyncio
    async def test_final_grade_syncs_transcript(
        self, grade_service, mock_db, courses, synchronizer, student_id, course,
        make_enrollment, scalar_result,
    ) -> None:
        """Test a final grade is derived and written to the transcript."""
        enrollment = make_enrollment(course_id=course.id)
        mock_db.execute.return_value = scalar_result(enrollment)
        grader = str(uuid4())

        result = await grade_service.submit_grade(
            student_id, course.id, 92, grader_id=grader, remarks="Excellent"
        )

        assert result.letter_grade == "A"
        assert result.grade_point == 10.0
        assert result.enrollment_id == enrollment.id
        assert result.graded_by == grader
        courses.get_course.assert_awaited_once_with(course.id, active_only=False)
        synchronizer.synchronize.assert_awaited_once_with(student_id, course, 92.0)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_midterm_does_not_sync(
        self, grade_service, mock_db, synchronizer, student_id, course,
        make_enrollment, scalar_result,
    ) -> None:
        """Test non-final assessments stay off the transcript."""
        mock_db.execute.return_value = scalar_result(make_enrollment(course_id=course.id))

        result = await grade_service.submit_grade(
            student_id, course.id, 45, assessment_type="midterm"
        )

        assert result.letter_grade == "P"
        synchronizer.synchronize.assert_not_called()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_completed_enrollment_is_gradable(
        self, grade_service, mock_db, synchronizer, student_id, course,
        make_enrollment, scalar_result,
    ) -> None:
        """Test grading after completion is allowed."""
        mock_db.execute.return_value = scalar_result(
            make_enrollment(course_id=course.id, status="completed", progress=100)
        )

        await grade_service.submit_grade(student_id, course.id, 65)

        synchronizer.synchronize.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_dropped_enrollment_not_gradable(
        self, grade_service, mock_db, student_id, course, make_enrollment, scalar_result
    ) -> None:
        """Test a dropped enrollment cannot be graded."""
        mock_db.execute.return_value = scalar_result(
            make_enrollment(course_id=course.id, status="dropped")
        )

        with pytest.raises(NotEnrolledError):
            await grade_service.submit_grade(student_id, course.id, 80)

        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_enrolled(
        self, grade_service, mock_db, student_id, course, scalar_result
    ) -> None:
        """Test grading a student with no enrollment."""
        mock_db.execute.return_value = scalar_result(None)

        with pytest.raises(NotEnrolledError):
            await grade_service.submit_grade(student_id, course.id, 80)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("marks", [-5, 100.5])
    async def test_invalid_marks(
        self, grade_service, mock_db, student_id, course, marks
    ) -> None:
        """Test marks outside 0-100 are rejected before any lookup."""
        with pytest.raises(InvalidMarksError):
            await grade_service.submit_grade(student_id, course.id, marks)

        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_assessment_type(
        self, grade_service, mock_db, student_id, course
    ) -> None:
        """Test unknown assessment types are rejected."""
        with pytest.raises(InvalidAssessmentTypeError):
            await grade_service.submit_grade(
                student_id, course.id, 80, assessment_type="oral"
            )

        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_sync_failure_rolls_back(
        self, grade_service, mock_db, synchronizer, student_id, course,
        make_enrollment, scalar_result,
    ) -> None:
        """Test the grade is not kept when the transcript write fails."""
        mock_db.execute.return_value = scalar_result(make_enrollment(course_id=course.id))
        synchronizer.synchronize.side_effect = LedgerInconsistentError("conflict")

        with pytest.raises(LedgerInconsistentError):
            await grade_service.submit_grade(student_id, course.id, 80)

        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_called()


class TestReviseGrade:
    """Tests for revise_grade."""

    @pytest.mark.asyncio
    async def test_revise_marks_resyncs(
        self, grade_service, mock_db, synchronizer, student_id, course, make_grade
    ) -> None:
        """Test changing final marks rewrites the transcript entry."""
        grade = make_grade(marks=92)
        mock_db.get.return_value = grade

        result = await grade_service.revise_grade(grade.id, marks=55)

        assert result.marks_obtained == 55.0
        assert result.letter_grade == "E"
        assert result.grade_point == 6.0
        synchronizer.synchronize.assert_awaited_once_with(student_id, course, 55.0)

    @pytest.mark.asyncio
    async def test_revise_remarks_only(
        self, grade_service, mock_db, synchronizer, make_grade
    ) -> None:
        """Test a remarks-only revision leaves the transcript alone."""
        grade = make_grade()
        mock_db.get.return_value = grade

        result = await grade_service.revise_grade(grade.id, remarks="Rechecked")

        assert result.remarks == "Rechecked"
        assert result.letter_grade == "C"
        synchronizer.synchronize.assert_not_called()

    @pytest.mark.asyncio
    async def test_revise_non_final_marks(
        self, grade_service, mock_db, synchronizer, make_grade
    ) -> None:
        """Test revising a quiz does not touch the transcript."""
        grade = make_grade(marks=30, assessment_type="quiz")
        mock_db.get.return_value = grade

        result = await grade_service.revise_grade(grade.id, marks=62)

        assert result.letter_grade == "D"
        synchronizer.synchronize.assert_not_called()

    @pytest.mark.asyncio
    async def test_revise_missing_grade(self, grade_service, mock_db) -> None:
        """Test revising an unknown grade."""
        mock_db.get.return_value = None

        with pytest.raises(GradeNotFoundError):
            await grade_service.revise_grade(str(uuid4()), marks=70)

    @pytest.mark.asyncio
    async def test_revise_invalid_marks(self, grade_service, mock_db) -> None:
        """Test invalid marks fail before the grade is loaded."""
        with pytest.raises(InvalidMarksError):
            await grade_service.revise_grade(str(uuid4()), marks=120)

        mock_db.get.assert_not_called()


class TestGradeToTranscript:
    """Grade submission and revision through the real synchronizer."""

    @pytest.mark.asyncio
    async def test_revision_replaces_transcript_entry(
        self, mock_db, settings, courses, student, course, record,
        make_enrollment, scalar_result,
    ) -> None:
        """Test 92 then 55 leaves one entry graded E."""
        enrollment = make_enrollment(course_id=course.id, owner_id=student.id)
        added: list[Grade] = []

        async def execute(stmt, *args, **kwargs):
            if "academic_records" in str(stmt):
                return scalar_result(record)
            return scalar_result(enrollment)

        async def get(model, key, *args, **kwargs):
            if model is User:
                return student
            return next((g for g in added if g.id == key), None)

        def add(obj) -> None:
            added.append(obj)

        mock_db.execute.side_effect = execute
        mock_db.get.side_effect = get
        mock_db.add.side_effect = add
        mock_db.refresh.side_effect = _refresh_grade

        service = GradeService(
            db=mock_db,
            courses=courses,
            synchronizer=TranscriptSynchronizer(
                mock_db, settings=settings, scale=DEFAULT_GRADING_SCALE
            ),
            scale=DEFAULT_GRADING_SCALE,
        )

        submitted = await service.submit_grade(student.id, course.id, 92)

        assert record.cgpa == 10.0
        assert record.total_credits_earned == 4
        assert student.credits_earned == 4

        await service.revise_grade(submitted.id, marks=55)

        assert len(record.course_records) == 1
        entry = record.course_records[0]
        assert (entry.marks_obtained, entry.letter_grade, entry.grade_point) == (55.0, "E", 6.0)
        assert entry.position == 0
        assert record.cgpa == 6.0
        assert record.total_credits_earned == 4
