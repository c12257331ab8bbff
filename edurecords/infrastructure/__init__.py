# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure package for EduRecords.

This package contains external service integrations:
- database: SQLAlchemy async connection management, models and migrations
"""
