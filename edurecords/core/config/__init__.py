# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for EduRecords.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- YAML loader: Utilities for loading YAML configuration files

Example:
    >>> from edurecords.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from edurecords.core.config.settings import (
    CORSSettings,
    DatabaseSettings,
    JWTSettings,
    LedgerSettings,
    RateLimitSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from edurecords.core.config.yaml_loader import YAMLLoadError, load_yaml

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "LedgerSettings",
    "JWTSettings",
    "CORSSettings",
    "RateLimitSettings",
    # YAML utilities
    "load_yaml",
    "YAMLLoadError",
]
