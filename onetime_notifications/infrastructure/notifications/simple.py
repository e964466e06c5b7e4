# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Minimal local notifications without push registration.

For screens that only need to show local notifications and do not care
about device tokens or topics.
"""

import logging
from typing import Any

from onetime_notifications.infrastructure.notifications.models import PermissionState
from onetime_notifications.infrastructure.notifications.permission import PermissionGate
from onetime_notifications.infrastructure.notifications.platform import (
    NotificationHandle,
    NotificationOptions,
    PlatformCapabilities,
)

logger = logging.getLogger(__name__)


class SimpleNotifier:
    """Permission toggle plus local notification display."""

    def __init__(
        self,
        platform: PlatformCapabilities,
        icon: str = "/icon-192x192.png",
        badge: str = "/badge-72x72.png",
    ) -> None:
        self._platform = platform
        self._gate = PermissionGate(platform)
        self._icon = icon
        self._badge = badge
        self.is_enabled = self._gate.current_permission() == PermissionState.GRANTED

    async def enable(self) -> bool:
        """Request permission and remember the outcome."""
        self.is_enabled = await self._gate.request_permission()
        return self.is_enabled

    def show_notification(
        self,
        title: str,
        body: str = "",
        data: dict[str, Any] | None = None,
    ) -> NotificationHandle | None:
        """Show a local notification if notifications are enabled.

        Returns:
            The displayed notification, or None when disabled.
        """
        if not self.is_enabled:
            logger.debug("Notifications disabled; dropping %r", title)
            return None

        url = (data or {}).get("actionUrl")

        def _on_click(handle: NotificationHandle) -> None:
            self._platform.focus()
            handle.close()
            if url:
                self._platform.navigate(url)

        options = NotificationOptions(
            body=body,
            icon=self._icon,
            badge=self._badge,
            data=dict(data or {}),
        )
        return self._platform.show_notification(title, options, on_click=_on_click)
