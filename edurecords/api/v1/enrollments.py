# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment API endpoints.

This module provides endpoints for the enrollment lifecycle:
- POST / - Enroll in a course
- GET /my - List the caller's enrollments
- GET /course/{course_id} - List a course's enrollments
- PUT /{enrollment_id}/progress - Report progress
- PUT /{enrollment_id}/drop - Drop an enrollment

Students enroll themselves; administrators may enroll any student.
Progress and drop are restricted to the owning student. Ledger errors are
mapped to HTTP statuses by the application exception handler.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from edurecords.api.dependencies import (
    EnrollmentServiceDep,
    FacultyOrAdmin,
    StudentOrAdmin,
    StudentUser,
)
from edurecords.models.enrollment import (
    EnrollmentListResponse,
    EnrollmentResponse,
    EnrollRequest,
    ProgressUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enroll in a course",
)
async def enroll(
    data: EnrollRequest,
    current_user: StudentOrAdmin,
    service: EnrollmentServiceDep,
) -> EnrollmentResponse:
    """Enroll a student in a course.

    Args:
        data: Enrollment request.
        current_user: Authenticated student or admin.
        service: Enrollment service.

    Returns:
        The created enrollment.

    Raises:
        HTTPException: If an admin omits the student id.
    """
    if current_user.is_admin:
        if not data.student_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="student_id is required when enrolling on behalf of a student",
            )
        student_id = str(data.student_id)
    else:
        student_id = current_user.id

    return await service.enroll(student_id=student_id, course_id=str(data.course_id))


@router.get(
    "/my",
    response_model=EnrollmentListResponse,
    summary="List my enrollments",
)
async def list_my_enrollments(
    current_user: StudentUser,
    service: EnrollmentServiceDep,
) -> EnrollmentListResponse:
    """List the calling student's enrollments."""
    return await service.list_student_enrollments(current_user.id)


@router.get(
    "/course/{course_id}",
    response_model=EnrollmentListResponse,
    summary="List course enrollments",
)
async def list_course_enrollments(
    course_id: UUID,
    current_user: FacultyOrAdmin,
    service: EnrollmentServiceDep,
) -> EnrollmentListResponse:
    """List a course's enrollments (faculty and admins)."""
    return await service.list_course_enrollments(str(course_id))


@router.put(
    "/{enrollment_id}/progress",
    response_model=EnrollmentResponse,
    summary="Report progress",
)
async def update_progress(
    enrollment_id: UUID,
    data: ProgressUpdateRequest,
    current_user: StudentUser,
    service: EnrollmentServiceDep,
) -> EnrollmentResponse:
    """Report progress on the caller's enrollment.

    Reaching 100% completes the enrollment and writes the course into the
    student's transcript.
    """
    return await service.update_progress(
        enrollment_id=str(enrollment_id),
        caller_id=current_user.id,
        percentage=data.progress_percentage,
        completed_modules=data.completed_modules,
    )


@router.put(
    "/{enrollment_id}/drop",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Drop an enrollment",
)
async def drop_enrollment(
    enrollment_id: UUID,
    current_user: StudentUser,
    service: EnrollmentServiceDep,
) -> None:
    """Drop the caller's active enrollment."""
    await service.drop_enrollment(enrollment_id=str(enrollment_id), caller_id=current_user.id)
