# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""NEP exit qualification tracking.

Under the National Education Policy multiple entry/exit scheme a student can
leave with a certificate, diploma, degree or postgraduate qualification. Each
award is appended to the record's exit history and becomes its current level.
"""

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.core.config import get_settings
from edurecords.domains.ledger.errors import (
    ExitLevelRegressionError,
    InvalidArgumentError,
    InvalidExitLevelError,
)
from edurecords.domains.ledger.unit import run_ledger_unit
from edurecords.infrastructure.database.models import AcademicRecord, ExitQualification, User
from edurecords.utils.datetime import utc_now

if TYPE_CHECKING:
    from edurecords.core.config.settings import Settings

logger = logging.getLogger(__name__)

# Lowest to highest.
EXIT_LEVELS: tuple[str, ...] = ("certificate", "diploma", "degree", "postgraduate")

_LEVEL_RANK = {level: rank for rank, level in enumerate(EXIT_LEVELS)}


def exit_level_rank(level: str) -> int:
    """Get the ordinal of an exit level.

    Raises:
        InvalidExitLevelError: If the level is unknown.
    """
    try:
        return _LEVEL_RANK[level]
    except KeyError:
        raise InvalidExitLevelError(
            f"Unknown exit level '{level}', expected one of {', '.join(EXIT_LEVELS)}"
        ) from None


class ExitQualificationTracker:
    """Records exit awards on academic records.

    Attributes:
        db: Async database session.
        settings: Application settings.
    """

    def __init__(self, db: AsyncSession, settings: Optional["Settings"] = None) -> None:
        self.db = db
        self.settings = settings or get_settings()

    async def record_exit(
        self,
        record_id: str,
        level: str,
        total_credits: int | None = None,
        recorded_by: str | None = None,
    ) -> ExitQualification:
        """Append an exit award and move the record's current level.

        Args:
            record_id: Academic record identifier.
            level: Exit level.
            total_credits: Credits to attest; defaults to the record's
                current earned credits. An explicit 0 is kept.
            recorded_by: Identifier of the acting administrator.

        Returns:
            The appended exit qualification.

        Raises:
            InvalidExitLevelError: If the level is unknown.
            InvalidArgumentError: If total_credits is negative.
            ExitLevelRegressionError: If the level is below the current one
                and the regression policy is "reject".
            RecordNotFoundError: If the record does not exist.
        """
        new_rank = exit_level_rank(level)
        if total_credits is not None and total_credits < 0:
            raise InvalidArgumentError(f"Exit credits cannot be negative, got {total_credits}")

        policy = self.settings.ledger.exit_regression_policy

        async def apply(record: AcademicRecord) -> ExitQualification:
            current = record.current_level
            if current is not None and new_rank < exit_level_rank(current):
                if policy == "reject":
                    raise ExitLevelRegressionError(
                        f"Cannot record '{level}' below current level '{current}'"
                    )
                logger.warning(
                    "Exit level regression allowed: record=%s, %s -> %s",
                    record.id,
                    current,
                    level,
                )

            credits = record.total_credits_earned if total_credits is None else total_credits
            position = max((q.position for q in record.exit_qualifications), default=-1) + 1

            qualification = ExitQualification(
                record_id=record.id,
                position=position,
                level=level,
                awarded_at=utc_now(),
                total_credits=credits,
                recorded_by=str(recorded_by) if recorded_by is not None else None,
            )
            record.exit_qualifications.append(qualification)
            record.current_level = level

            student = await self.db.get(User, record.student_id)
            if student is not None:
                student.academic_level = level

            return qualification

        qualification = await run_ledger_unit(
            self.db,
            apply,
            record_id=str(record_id),
            max_attempts=self.settings.ledger.max_sync_attempts,
        )

        logger.info(
            "Exit recorded: record=%s, level=%s, credits=%d, by=%s",
            record_id,
            level,
            qualification.total_credits,
            recorded_by,
        )
        return qualification
