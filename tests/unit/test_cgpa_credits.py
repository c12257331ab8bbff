# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for CGPA recalculation and the credit ledger."""

import pytest

from edurecords.domains.ledger.cgpa import calculate_cgpa, recalculate_cgpa
from edurecords.domains.ledger.credits import compute_credit_totals, is_earned, settle_credits


class TestCalculateCgpa:
    """Tests for credit-weighted CGPA."""

    def test_empty_transcript_is_zero(self) -> None:
        """Test no entries gives 0."""
        assert calculate_cgpa([]) == 0.0

    def test_credit_weighted_mean(self, make_entry) -> None:
        """Test (1*8 + 2*7) / 3."""
        entries = [make_entry(credits=1, grade_point=8.0), make_entry(credits=2, grade_point=7.0)]

        assert calculate_cgpa(entries) == pytest.approx(22 / 3)

    def test_ungraded_entries_skipped(self, make_entry) -> None:
        """Test ungraded completions do not dilute the CGPA."""
        entries = [make_entry(credits=4, grade_point=9.0), make_entry(credits=4, grade_point=None)]

        assert calculate_cgpa(entries) == 9.0

    def test_only_ungraded_is_zero(self, make_entry) -> None:
        """Test graded credits of zero give 0."""
        assert calculate_cgpa([make_entry(credits=3, grade_point=None)]) == 0.0

    def test_zero_credit_entries_ignored(self, make_entry) -> None:
        """Test zero-credit entries carry no weight."""
        entries = [make_entry(credits=0, grade_point=0.0), make_entry(credits=2, grade_point=6.0)]

        assert calculate_cgpa(entries) == 6.0

    def test_recalculate_rounds_to_two_decimals(self, record, make_entry) -> None:
        """Test the stored CGPA is rounded."""
        record.course_records = [
            make_entry(credits=1, grade_point=8.0, position=0),
            make_entry(credits=2, grade_point=7.0, position=1),
        ]

        assert recalculate_cgpa(record) == 7.33
        assert record.cgpa == 7.33

    def test_recalculate_is_idempotent(self, record, make_entry) -> None:
        """Test recomputation from the same transcript gives the same value."""
        record.course_records = [make_entry(credits=3, grade_point=9.0)]

        first = recalculate_cgpa(record)
        second = recalculate_cgpa(record)

        assert first == second == 9.0


class TestCreditTotals:
    """Tests for attempted/earned credits and skills."""

    def test_failed_entry_attempted_not_earned(self, make_entry) -> None:
        """Test a failing grade counts only towards attempted."""
        entries = [make_entry(credits=4, grade_point=10.0), make_entry(credits=3, grade_point=0.0)]

        totals = compute_credit_totals(entries, pass_grade_point=5.0)

        assert totals.attempted == 7
        assert totals.earned == 4

    def test_pass_threshold_is_inclusive(self, make_entry) -> None:
        """Test a grade point equal to the threshold passes."""
        assert is_earned(make_entry(credits=2, grade_point=5.0), pass_grade_point=5.0)
        assert not is_earned(make_entry(credits=2, grade_point=4.9), pass_grade_point=5.0)

    def test_ungraded_completion_is_earned(self, make_entry) -> None:
        """Test completion without a final grade earns its credits."""
        totals = compute_credit_totals([make_entry(credits=4, grade_point=None)], 5.0)

        assert totals.earned == 4

    def test_skills_deduplicated_in_first_seen_order(self, make_entry) -> None:
        """Test the skill union keeps first occurrence order."""
        entries = [
            make_entry(credits=1, grade_point=9.0, skill_tags=["python", "sql"]),
            make_entry(credits=1, grade_point=9.0, skill_tags=["git", "python"]),
            make_entry(credits=1, grade_point=0.0, skill_tags=["sql", "statistics"]),
        ]

        totals = compute_credit_totals(entries, 5.0)

        assert totals.skills == ["python", "sql", "git", "statistics"]

    def test_settle_writes_record_and_user_cache(self, record, student, make_entry) -> None:
        """Test the ledger rewrites totals and the user's credit cache."""
        record.course_records = [
            make_entry(credits=4, grade_point=10.0, skill_tags=["python"]),
            make_entry(credits=2, grade_point=0.0, skill_tags=["ethics"]),
        ]
        record.total_credits_earned = 99
        student.credits_earned = 99

        totals = settle_credits(record, student, pass_grade_point=5.0)

        assert totals.earned == 4
        assert record.total_credits_attempted == 6
        assert record.total_credits_earned == 4
        assert record.skills_acquired == ["python", "ethics"]
        assert student.credits_earned == 4

    def test_settle_without_user_row(self, record, make_entry) -> None:
        """Test the record is still settled when the user row is missing."""
        record.course_records = [make_entry(credits=3, grade_point=8.0)]

        settle_credits(record, None, pass_grade_point=5.0)

        assert record.total_credits_earned == 3
