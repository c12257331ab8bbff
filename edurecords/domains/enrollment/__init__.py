# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enrollment domain package.

This package provides the course enrollment lifecycle:
- Enrollment with capacity admission
- Progress events and completion
- Dropping an enrollment
"""

from edurecords.domains.enrollment.service import EnrollmentService

__all__ = [
    "EnrollmentService",
]
