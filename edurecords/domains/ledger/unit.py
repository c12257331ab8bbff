# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-student atomic ledger update scope.

Every change to an AcademicRecord goes through ``run_ledger_unit``:

1. a savepoint is opened on the caller's session,
2. the record is re-read ``FOR UPDATE`` (fresh attributes, row lock),
3. the operation mutates the record and its transcript,
4. ``last_synced_at`` is stamped and the session is flushed, which makes the
   ORM issue ``UPDATE ... WHERE version = :old``.

A ``StaleDataError`` rolls the savepoint back and the unit is replayed with a
fresh read. When attempts are exhausted the failure surfaces as
``LedgerInconsistentError``. Any other error rolls the savepoint back and
propagates unchanged, so no partial ledger state is ever left behind.

The unit never commits; the calling service owns the transaction.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from edurecords.core.config import get_settings
from edurecords.domains.ledger.errors import LedgerInconsistentError, RecordNotFoundError
from edurecords.infrastructure.database.models import AcademicRecord
from edurecords.utils.datetime import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

LedgerOperation = Callable[[AcademicRecord], Awaitable[T]]


async def load_record_for_update(
    db: AsyncSession,
    *,
    student_id: str | None = None,
    record_id: str | None = None,
) -> AcademicRecord:
    """Lock and load an academic record with fresh attributes.

    Args:
        db: Async database session.
        student_id: Owning student identifier.
        record_id: Record identifier (used when student_id is not given).

    Returns:
        The locked AcademicRecord.

    Raises:
        RecordNotFoundError: If no record matches.
        ValueError: If neither identifier is given.
    """
    if student_id is not None:
        condition = AcademicRecord.student_id == str(student_id)
        label = f"student {student_id}"
    elif record_id is not None:
        condition = AcademicRecord.id == str(record_id)
        label = f"id {record_id}"
    else:
        raise ValueError("student_id or record_id is required")

    stmt = (
        select(AcademicRecord)
        .where(condition)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    record = result.scalar_one_or_none()

    if record is None:
        raise RecordNotFoundError(f"Academic record for {label} not found")

    return record


async def run_ledger_unit(
    db: AsyncSession,
    operation: LedgerOperation[T],
    *,
    student_id: str | None = None,
    record_id: str | None = None,
    max_attempts: int | None = None,
) -> T:
    """Run a record mutation as one atomic, version-checked unit.

    Args:
        db: Async database session (transaction owned by the caller).
        operation: Coroutine function receiving the locked record.
        student_id: Owning student identifier.
        record_id: Record identifier (alternative to student_id).
        max_attempts: Attempts before giving up; defaults to
            ``settings.ledger.max_sync_attempts``.

    Returns:
        Whatever the operation returns.

    Raises:
        LedgerInconsistentError: If the version check keeps failing.
        RecordNotFoundError: If the record does not exist.
    """
    attempts = max_attempts or get_settings().ledger.max_sync_attempts
    last_error: StaleDataError | None = None

    for attempt in range(1, attempts + 1):
        try:
            async with db.begin_nested():
                record = await load_record_for_update(
                    db, student_id=student_id, record_id=record_id
                )
                result = await operation(record)
                record.last_synced_at = utc_now()
                await db.flush()
            return result
        except StaleDataError as e:
            last_error = e
            logger.warning(
                "Ledger version conflict (attempt %d/%d): student=%s, record=%s",
                attempt,
                attempts,
                student_id,
                record_id,
            )

    logger.error(
        "Ledger update abandoned after %d attempts: student=%s, record=%s",
        attempts,
        student_id,
        record_id,
    )
    raise LedgerInconsistentError(
        "Academic record changed concurrently; update was not applied"
    ) from last_error
