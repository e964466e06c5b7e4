# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the Onetime notification client.

Example:
    >>> from onetime_notifications.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from onetime_notifications.core.config.settings import (
    ApiSettings,
    FirebaseSettings,
    NotificationSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "ApiSettings",
    "FirebaseSettings",
    "NotificationSettings",
]
