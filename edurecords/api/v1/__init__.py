# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Modules:
    enrollments: Enrollment lifecycle endpoints.
    grades: Grade submission, revision and listing endpoints.
    academic_records: Transcript, verification, exit and reconciliation endpoints.
"""

from fastapi import APIRouter

from edurecords.api.v1 import academic_records, enrollments, grades

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
router.include_router(grades.router, prefix="/grades", tags=["Grades"])
router.include_router(
    academic_records.router,
    prefix="/academic-records",
    tags=["Academic Records"],
)

__all__ = ["router"]
