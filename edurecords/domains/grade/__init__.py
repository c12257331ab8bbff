# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade domain package."""

from edurecords.domains.grade.service import ASSESSMENT_TYPES, GradeService

__all__ = [
    "GradeService",
    "ASSESSMENT_TYPES",
]
