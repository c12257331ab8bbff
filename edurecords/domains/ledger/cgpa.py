# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""CGPA recalculation over a transcript."""

from typing import Iterable

from edurecords.infrastructure.database.models import AcademicRecord, TranscriptEntry

CGPA_DECIMALS = 2


def calculate_cgpa(entries: Iterable[TranscriptEntry]) -> float:
    """Credit-weighted mean grade point over graded entries.

    Ungraded completions carry no grade point and are skipped.

    Args:
        entries: Transcript entries.

    Returns:
        Unrounded CGPA, or 0.0 when no graded credits exist.
    """
    weighted_points = 0.0
    graded_credits = 0

    for entry in entries:
        if not entry.is_graded:
            continue
        weighted_points += entry.credits * entry.grade_point
        graded_credits += entry.credits

    if graded_credits == 0:
        return 0.0

    return weighted_points / graded_credits


def recalculate_cgpa(record: AcademicRecord) -> float:
    """Recompute and store the record's CGPA from its full transcript.

    Args:
        record: Academic record to update.

    Returns:
        Stored CGPA, rounded to two decimals.
    """
    record.cgpa = round(calculate_cgpa(record.course_records), CGPA_DECIMALS)
    return record.cgpa
