# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Credit ledger.

Totals and acquired skills are always re-derived from the transcript, never
incremented. The ledger is the only writer of ``User.credits_earned``.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from edurecords.infrastructure.database.models import AcademicRecord, TranscriptEntry, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreditTotals:
    """Ledger figures derived from a transcript."""

    attempted: int = 0
    earned: int = 0
    skills: list[str] = field(default_factory=list)


def is_earned(entry: TranscriptEntry, pass_grade_point: float) -> bool:
    """Check whether an entry's credits count as earned.

    Ungraded completions count as earned; graded entries need at least the
    pass grade point.
    """
    return not entry.is_graded or entry.grade_point >= pass_grade_point


def compute_credit_totals(
    entries: Iterable[TranscriptEntry],
    pass_grade_point: float,
) -> CreditTotals:
    """Derive attempted/earned credits and the skill union.

    Args:
        entries: Transcript entries in transcript order.
        pass_grade_point: Minimum passing grade point.

    Returns:
        CreditTotals with skills in first-seen order.
    """
    attempted = 0
    earned = 0
    skills: list[str] = []
    seen: set[str] = set()

    for entry in entries:
        attempted += entry.credits
        if is_earned(entry, pass_grade_point):
            earned += entry.credits
        for tag in entry.skill_tags or []:
            if tag not in seen:
                seen.add(tag)
                skills.append(tag)

    return CreditTotals(attempted=attempted, earned=earned, skills=skills)


def settle_credits(
    record: AcademicRecord,
    student: User | None,
    pass_grade_point: float,
) -> CreditTotals:
    """Rewrite the record's totals and skills, then the user cache.

    Args:
        record: Academic record to update.
        student: Owning user whose ``credits_earned`` cache is refreshed.
        pass_grade_point: Minimum passing grade point.

    Returns:
        The derived totals.
    """
    totals = compute_credit_totals(record.course_records, pass_grade_point)

    record.total_credits_attempted = totals.attempted
    record.total_credits_earned = totals.earned
    record.skills_acquired = list(totals.skills)

    if student is not None:
        student.credits_earned = totals.earned
    else:
        logger.warning("No user row for record %s, credit cache not updated", record.id)

    return totals
