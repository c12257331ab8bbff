# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic record API endpoints.

This module provides endpoints for the digital academic record:
- GET /my - The caller's transcript
- GET /{student_id} - A student's transcript
- PUT /{record_id}/verify - Verify a record
- PUT /{record_id}/exit - Record an NEP exit
- POST /{student_id}/reconcile - Re-derive a record from its transcript

Students may read only their own record. Verification, exits and
reconciliation require admin access.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from edurecords.api.dependencies import (
    AcademicRecordServiceDep,
    AdminUser,
    AuthenticatedUser,
    StudentUser,
)
from edurecords.models.academic_record import (
    AcademicRecordResponse,
    ExitQualificationResponse,
    ReconciliationReport,
    RecordExitRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/my",
    response_model=AcademicRecordResponse,
    summary="Get my academic record",
)
async def get_my_record(
    current_user: StudentUser,
    service: AcademicRecordServiceDep,
) -> AcademicRecordResponse:
    return await service.get_transcript(current_user.id)


@router.get(
    "/{student_id}",
    response_model=AcademicRecordResponse,
    summary="Get a student's academic record",
)
async def get_student_record(
    student_id: UUID,
    current_user: AuthenticatedUser,
    service: AcademicRecordServiceDep,
) -> AcademicRecordResponse:
    """Get a student's academic record.

    Raises:
        HTTPException: If a student requests another student's record.
    """
    if current_user.is_student and current_user.id != str(student_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Students can only view their own academic record",
        )

    return await service.get_transcript(str(student_id))


@router.put(
    "/{record_id}/verify",
    response_model=AcademicRecordResponse,
    summary="Verify an academic record",
)
async def verify_record(
    record_id: UUID,
    current_user: AdminUser,
    service: AcademicRecordServiceDep,
) -> AcademicRecordResponse:
    return await service.verify_record(str(record_id), verified_by=current_user.id)


@router.put(
    "/{record_id}/exit",
    response_model=ExitQualificationResponse,
    summary="Record an NEP exit",
)
async def record_exit(
    record_id: UUID,
    data: RecordExitRequest,
    current_user: AdminUser,
    service: AcademicRecordServiceDep,
) -> ExitQualificationResponse:
    """Record an exit qualification.

    Credits default to the record's earned credits when not given.
    """
    return await service.record_exit(
        str(record_id),
        data.level,
        total_credits=data.total_credits,
        recorded_by=current_user.id,
    )


@router.post(
    "/{student_id}/reconcile",
    response_model=ReconciliationReport,
    summary="Reconcile an academic record",
)
async def reconcile_record(
    student_id: UUID,
    current_user: AdminUser,
    service: AcademicRecordServiceDep,
) -> ReconciliationReport:
    logger.info("Reconciling record of student %s by %s", student_id, current_user.id)
    return await service.reconcile(str(student_id))
