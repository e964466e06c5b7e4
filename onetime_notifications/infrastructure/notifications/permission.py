# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Permission gate over the host platform's notification permission."""

import logging

from onetime_notifications.infrastructure.notifications.models import PermissionState
from onetime_notifications.infrastructure.notifications.platform import PlatformCapabilities

logger = logging.getLogger(__name__)


class PermissionGate:
    """Reads and requests notification permission.

    Platforms refuse to re-prompt once the user has denied permission, so
    only the DEFAULT state ever reaches the native prompt.
    """

    def __init__(self, platform: PlatformCapabilities) -> None:
        self._platform = platform

    @property
    def is_supported(self) -> bool:
        """Whether the platform has any notification capability."""
        return self._platform.is_supported

    def current_permission(self) -> PermissionState:
        """Read the platform permission without blocking.

        Returns:
            UNSUPPORTED on platforms without notifications, otherwise the
            platform's DEFAULT, GRANTED or DENIED state.
        """
        if not self._platform.is_supported:
            return PermissionState.UNSUPPORTED
        return self._platform.permission()

    async def request_permission(self) -> bool:
        """Ask for notification permission.

        Returns:
            True if permission is granted after the call.
        """
        current = self.current_permission()

        if current == PermissionState.UNSUPPORTED:
            logger.warning("This platform does not support notifications")
            return False

        if current == PermissionState.GRANTED:
            return True

        if current == PermissionState.DENIED:
            logger.warning("Notification permission is denied")
            return False

        result = await self._platform.prompt_permission()
        logger.info("Notification permission prompt answered: %s", result.value)
        return result == PermissionState.GRANTED
