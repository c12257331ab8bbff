# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for EduRecords.

Domains:
    ledger: Grade derivation, transcript synchronization, credits and CGPA.
    enrollment: Course enrollment lifecycle.
    grade: Grade submission and revision.
    academic_record: Transcript reads, verification, NEP exits, reconciliation.
    auth: JWT token decoding.
"""
