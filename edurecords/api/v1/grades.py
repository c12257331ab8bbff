# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade API endpoints.

This module provides endpoints for grading:
- POST / - Assign a grade
- GET /student/{student_id} - List a student's grades
- GET /course/{course_id} - List a course's grades
- GET /my - List the caller's grades
- PUT /{grade_id} - Revise marks and/or remarks

Grading requires faculty or admin access.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, status

from edurecords.api.dependencies import (
    FacultyOrAdmin,
    GradeServiceDep,
    StudentUser,
)
from edurecords.models.grade import (
    GradeCreateRequest,
    GradeListResponse,
    GradeResponse,
    GradeUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign a grade",
)
async def submit_grade(
    data: GradeCreateRequest,
    current_user: FacultyOrAdmin,
    service: GradeServiceDep,
) -> GradeResponse:
    """Assign a grade to an enrolled student.

    A final grade is written into the student's transcript immediately.
    """
    return await service.submit_grade(
        student_id=str(data.student_id),
        course_id=str(data.course_id),
        marks=data.marks_obtained,
        assessment_type=data.assessment_type,
        grader_id=current_user.id,
        remarks=data.remarks,
    )


@router.get(
    "/student/{student_id}",
    response_model=GradeListResponse,
    summary="List a student's grades",
)
async def list_student_grades(
    student_id: UUID,
    current_user: FacultyOrAdmin,
    service: GradeServiceDep,
) -> GradeListResponse:
    return await service.list_grades_for_student(str(student_id))


@router.get(
    "/course/{course_id}",
    response_model=GradeListResponse,
    summary="List a course's grades",
)
async def list_course_grades(
    course_id: UUID,
    current_user: FacultyOrAdmin,
    service: GradeServiceDep,
) -> GradeListResponse:
    return await service.list_grades_for_course(str(course_id))


@router.get(
    "/my",
    response_model=GradeListResponse,
    summary="List my grades",
)
async def list_my_grades(
    current_user: StudentUser,
    service: GradeServiceDep,
) -> GradeListResponse:
    return await service.list_grades_for_student(current_user.id)


@router.put(
    "/{grade_id}",
    response_model=GradeResponse,
    summary="Revise a grade",
)
async def revise_grade(
    grade_id: UUID,
    data: GradeUpdateRequest,
    current_user: FacultyOrAdmin,
    service: GradeServiceDep,
) -> GradeResponse:
    """Revise a grade; letter grade and grade point are re-derived."""
    logger.info("Revising grade %s by %s", grade_id, current_user.id)

    return await service.revise_grade(
        grade_id=str(grade_id),
        marks=data.marks_obtained,
        remarks=data.remarks,
    )
