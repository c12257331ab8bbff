# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic record domain package.

This package provides:
- Transcript reads and administrative verification
- NEP exit qualification tracking
- Reconciliation of derived ledger fields
"""

from edurecords.domains.academic_record.exits import EXIT_LEVELS, ExitQualificationTracker
from edurecords.domains.academic_record.service import AcademicRecordService

__all__ = [
    "AcademicRecordService",
    "ExitQualificationTracker",
    "EXIT_LEVELS",
]
