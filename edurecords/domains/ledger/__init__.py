# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic progress and credit ledger.

This package keeps transcripts, credit totals, skills and CGPA consistent:
- grading: marks to letter grade and grade point
- transcript: one-entry-per-course synchronization
- credits / cgpa: totals re-derived from the transcript
- unit: per-student atomic, version-checked update scope
"""

from edurecords.domains.ledger.cgpa import calculate_cgpa, recalculate_cgpa
from edurecords.domains.ledger.courses import (
    CourseFactProvider,
    CourseFacts,
    DatabaseCourseFactProvider,
)
from edurecords.domains.ledger.credits import CreditTotals, compute_credit_totals, settle_credits
from edurecords.domains.ledger.errors import LedgerError, LedgerErrorKind
from edurecords.domains.ledger.grading import (
    DEFAULT_GRADING_SCALE,
    DerivedGrade,
    GradeBand,
    GradingScale,
    derive_grade,
    get_grading_scale,
    load_grading_scale,
)
from edurecords.domains.ledger.transcript import TranscriptSynchronizer, settle_record
from edurecords.domains.ledger.unit import load_record_for_update, run_ledger_unit

__all__ = [
    # Errors
    "LedgerError",
    "LedgerErrorKind",
    # Course facts
    "CourseFacts",
    "CourseFactProvider",
    "DatabaseCourseFactProvider",
    # Grading
    "GradeBand",
    "DerivedGrade",
    "GradingScale",
    "DEFAULT_GRADING_SCALE",
    "derive_grade",
    "get_grading_scale",
    "load_grading_scale",
    # Ledger
    "CreditTotals",
    "compute_credit_totals",
    "settle_credits",
    "calculate_cgpa",
    "recalculate_cgpa",
    "settle_record",
    "TranscriptSynchronizer",
    "run_ledger_unit",
    "load_record_for_update",
]
