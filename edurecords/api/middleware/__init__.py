# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- AuthMiddleware: JWT authentication.
- RequestContextMiddleware: Request id and caller bound to log context.
- create_limiter: slowapi rate limiter.
"""

from edurecords.api.middleware.auth import AuthMiddleware, CurrentUser
from edurecords.api.middleware.rate_limit import create_limiter
from edurecords.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RequestContextMiddleware",
    "create_limiter",
]
