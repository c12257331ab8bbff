# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get authenticated users and enforce roles
- Get service instances

Example:
    @router.get("/my")
    async def my_enrollments(
        current_user: StudentUser,
        service: EnrollmentServiceDep,
    ):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from edurecords.api.middleware.auth import CurrentUser, get_current_user
from edurecords.domains.academic_record.service import AcademicRecordService
from edurecords.domains.enrollment.service import EnrollmentService
from edurecords.domains.grade.service import GradeService
from edurecords.infrastructure.database.connection import get_session

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a records database session for the request.

    Yields:
        AsyncSession committed at the end of the request.
    """
    async with get_session() as session:
        yield session


def require_auth(request: Request) -> CurrentUser:
    """Require authenticated user.

    Args:
        request: HTTP request.

    Returns:
        CurrentUser.

    Raises:
        HTTPException: If not authenticated.
    """
    user = get_current_user(request)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


class RequireRole:
    """Dependency for requiring specific roles.

    Example:
        @router.put("/{record_id}/verify")
        async def verify(
            user: CurrentUser = Depends(RequireRole("admin")),
        ):
            ...
    """

    def __init__(self, *roles: str) -> None:
        """Initialize role requirement.

        Args:
            roles: Accepted role codes (any of these).
        """
        self.roles = roles

    def __call__(self, request: Request) -> CurrentUser:
        """Check roles and return user.

        Args:
            request: HTTP request.

        Returns:
            CurrentUser.

        Raises:
            HTTPException: If missing required roles.
        """
        user = require_auth(request)

        if not user.has_any_role(*self.roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(self.roles)}",
            )

        return user


# =========================================================================
# Services
# =========================================================================


def get_enrollment_service(db: Annotated[AsyncSession, Depends(get_db)]) -> EnrollmentService:
    """Get enrollment service instance."""
    return EnrollmentService(db=db)


def get_grade_service(db: Annotated[AsyncSession, Depends(get_db)]) -> GradeService:
    """Get grade service instance."""
    return GradeService(db=db)


def get_academic_record_service(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AcademicRecordService:
    """Get academic record service instance."""
    return AcademicRecordService(db=db)


# =========================================================================
# Type aliases for cleaner endpoint signatures
# =========================================================================

DB = Annotated[AsyncSession, Depends(get_db)]
AuthenticatedUser = Annotated[CurrentUser, Depends(require_auth)]
AdminUser = Annotated[CurrentUser, Depends(RequireRole("admin"))]
FacultyOrAdmin = Annotated[CurrentUser, Depends(RequireRole("faculty", "admin"))]
StudentUser = Annotated[CurrentUser, Depends(RequireRole("student"))]
StudentOrAdmin = Annotated[CurrentUser, Depends(RequireRole("student", "admin"))]

EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
GradeServiceDep = Annotated[GradeService, Depends(get_grade_service)]
AcademicRecordServiceDep = Annotated[AcademicRecordService, Depends(get_academic_record_service)]
