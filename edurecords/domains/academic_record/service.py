# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic record service.

This module provides the AcademicRecordService class for:
- Opening a student's record
- Reading the transcript
- Administrative verification
- Recording NEP exits
- Reconciling derived fields and the user credit cache
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.core.config import get_settings
from edurecords.domains.academic_record.exits import ExitQualificationTracker
from edurecords.domains.ledger.cgpa import CGPA_DECIMALS, calculate_cgpa
from edurecords.domains.ledger.credits import compute_credit_totals
from edurecords.domains.ledger.errors import (
    LedgerError,
    RecordNotFoundError,
    StudentNotFoundError,
)
from edurecords.domains.ledger.transcript import settle_record
from edurecords.domains.ledger.unit import run_ledger_unit
from edurecords.infrastructure.database.models import AcademicRecord, User
from edurecords.models.academic_record import (
    AcademicRecordResponse,
    ExitQualificationResponse,
    FieldDivergence,
    ReconciliationReport,
)
from edurecords.utils.datetime import utc_now

if TYPE_CHECKING:
    from edurecords.core.config.settings import Settings

logger = logging.getLogger(__name__)


class AcademicRecordService:
    """Service for academic record operations.

    Attributes:
        db: Async database session.
        settings: Application settings.
        exits: Exit qualification tracker.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional["Settings"] = None,
        exits: ExitQualificationTracker | None = None,
    ) -> None:
        """Initialize academic record service.

        Args:
            db: Async database session.
            settings: Application settings.
            exits: Exit qualification tracker; defaults to one on this session.
        """
        self.db = db
        self.settings = settings or get_settings()
        self.exits = exits or ExitQualificationTracker(db, self.settings)

    async def open_record(self, student_id: str) -> AcademicRecordResponse:
        """Create a student's academic record if it does not exist yet.

        Args:
            student_id: Student identifier.

        Returns:
            The new or existing record.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        existing = await self._find_by_student(student_id)
        if existing is not None:
            return AcademicRecordResponse.model_validate(existing)

        student = await self.db.get(User, str(student_id))
        if student is None or not student.is_student:
            raise StudentNotFoundError(f"Student {student_id} not found")

        record = AcademicRecord(
            student_id=str(student_id),
            course_records=[],
            exit_qualifications=[],
            total_credits_attempted=0,
            total_credits_earned=0,
            skills_acquired=[],
            cgpa=0.0,
            is_verified=False,
        )

        try:
            self.db.add(record)
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            existing = await self._find_by_student(student_id)
            if existing is None:
                raise
            return AcademicRecordResponse.model_validate(existing)

        await self.db.refresh(record)

        logger.info("Opened academic record: student=%s, record=%s", student_id, record.id)

        return AcademicRecordResponse.model_validate(record)

    async def get_transcript(self, student_id: str) -> AcademicRecordResponse:
        """Get a student's full academic record.

        Raises:
            RecordNotFoundError: If the student has no record.
        """
        record = await self._find_by_student(student_id)
        if record is None:
            raise RecordNotFoundError(f"Academic record for student {student_id} not found")

        return AcademicRecordResponse.model_validate(record)

    async def verify_record(self, record_id: str, verified_by: str) -> AcademicRecordResponse:
        """Mark a record as verified by an administrator.

        Args:
            record_id: Academic record identifier.
            verified_by: Identifier of the verifying administrator.

        Returns:
            The verified record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """

        async def apply(record: AcademicRecord) -> AcademicRecord:
            record.is_verified = True
            record.verified_by = str(verified_by)
            record.verified_at = utc_now()
            return record

        try:
            record = await run_ledger_unit(
                self.db,
                apply,
                record_id=str(record_id),
                max_attempts=self.settings.ledger.max_sync_attempts,
            )
            await self.db.commit()
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        logger.info("Verified academic record: record=%s, by=%s", record_id, verified_by)

        return AcademicRecordResponse.model_validate(record)

    async def record_exit(
        self,
        record_id: str,
        level: str,
        total_credits: int | None = None,
        recorded_by: str | None = None,
    ) -> ExitQualificationResponse:
        """Record an NEP exit qualification.

        Raises:
            InvalidExitLevelError: If the level is unknown.
            ExitLevelRegressionError: If the level regresses under "reject".
            RecordNotFoundError: If the record does not exist.
        """
        try:
            qualification = await self.exits.record_exit(
                record_id,
                level,
                total_credits=total_credits,
                recorded_by=recorded_by,
            )
            await self.db.commit()
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        return ExitQualificationResponse.model_validate(qualification)

    async def reconcile(self, student_id: str) -> ReconciliationReport:
        """Re-derive a record from its transcript and repair divergences.

        CGPA, credit totals, skills and the user's ``credits_earned`` and
        ``academic_level`` caches are recomputed. Every stored value that
        differed from its derived value is reported.

        Args:
            student_id: Student identifier.

        Returns:
            Reconciliation report.

        Raises:
            RecordNotFoundError: If the student has no record.
        """
        pass_grade_point = self.settings.ledger.pass_grade_point
        student = await self.db.get(User, str(student_id))

        async def apply(record: AcademicRecord) -> ReconciliationReport:
            totals = compute_credit_totals(record.course_records, pass_grade_point)
            derived: dict[str, tuple[Any, Any]] = {
                "cgpa": (
                    record.cgpa,
                    round(calculate_cgpa(record.course_records), CGPA_DECIMALS),
                ),
                "total_credits_attempted": (record.total_credits_attempted, totals.attempted),
                "total_credits_earned": (record.total_credits_earned, totals.earned),
                "skills_acquired": (list(record.skills_acquired or []), totals.skills),
            }
            if student is not None:
                derived["user.credits_earned"] = (student.credits_earned, totals.earned)
                derived["user.academic_level"] = (student.academic_level, record.current_level)

            divergences = [
                FieldDivergence(field=name, stored=stored, derived=value)
                for name, (stored, value) in derived.items()
                if stored != value
            ]

            settle_record(record, student, pass_grade_point)
            if student is not None:
                student.academic_level = record.current_level

            return ReconciliationReport(
                student_id=str(student_id),
                record_id=record.id,
                is_consistent=not divergences,
                divergences=divergences,
                reconciled_at=utc_now(),
            )

        try:
            report = await run_ledger_unit(
                self.db,
                apply,
                student_id=str(student_id),
                max_attempts=self.settings.ledger.max_sync_attempts,
            )
            await self.db.commit()
        except (LedgerError, SQLAlchemyError):
            await self.db.rollback()
            raise

        if report.is_consistent:
            logger.info("Reconciled academic record: student=%s, no divergence", student_id)
        else:
            logger.warning(
                "Reconciled academic record: student=%s, repaired=%s",
                student_id,
                ", ".join(d.field for d in report.divergences),
            )

        return report

    async def _find_by_student(self, student_id: str) -> AcademicRecord | None:
        result = await self.db.execute(
            select(AcademicRecord).where(AcademicRecord.student_id == str(student_id))
        )
        return result.scalar_one_or_none()
