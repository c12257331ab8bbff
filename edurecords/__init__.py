"""EduRecords Backend.

Student-records platform built around the academic progress and credit
ledger: enrollments, grades, transcripts, credit totals, CGPA and NEP exit
qualifications kept consistent per student.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
