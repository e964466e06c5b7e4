# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Host platform capabilities consumed by the notification lifecycle.

The lifecycle never probes its host environment directly. A
PlatformCapabilities implementation is injected at construction time and
answers whether notifications are supported, what the current permission
is, and how to prompt, display, focus and navigate.

UnsupportedPlatform is the implementation for hosts without any
notification capability (headless workers, server-side rendering).
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from onetime_notifications.infrastructure.notifications.exceptions import (
    NotificationsUnsupportedError,
)
from onetime_notifications.infrastructure.notifications.models import PermissionState

logger = logging.getLogger(__name__)


@dataclass
class NotificationOptions:
    """Options for a locally displayed notification.

    Attributes:
        body: Body text.
        icon: Icon URL.
        badge: Badge URL.
        data: Custom data attached to the notification.
    """

    body: str = ""
    icon: str | None = None
    badge: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class NotificationHandle(ABC):
    """A notification currently shown by the platform."""

    @abstractmethod
    def close(self) -> None:
        """Dismiss the notification."""
        ...


ClickHandler = Callable[[NotificationHandle], None]


class PlatformCapabilities(ABC):
    """Abstract host platform notification API.

    Implementations wrap whatever the host provides (browser Notification
    API, desktop notification daemon, mobile bridge).
    """

    @property
    @abstractmethod
    def is_supported(self) -> bool:
        """Whether the host can display notifications at all."""
        ...

    @abstractmethod
    def permission(self) -> PermissionState:
        """Read the current permission synchronously."""
        ...

    @abstractmethod
    async def prompt_permission(self) -> PermissionState:
        """Show the native permission prompt and return the user's choice."""
        ...

    @abstractmethod
    def show_notification(
        self,
        title: str,
        options: NotificationOptions,
        on_click: ClickHandler | None = None,
    ) -> NotificationHandle:
        """Display a local notification.

        Args:
            title: Notification title.
            options: Body, icon, badge and data.
            on_click: Called with the handle when the user clicks it.

        Returns:
            Handle for the displayed notification.
        """
        ...

    @abstractmethod
    def focus(self) -> None:
        """Bring the application to the foreground."""
        ...

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Navigate the application to ``url``."""
        ...

    async def register_background_receiver(self, script_path: str) -> None:
        """Register the receiver that handles delivery while unfocused.

        Hosts without background delivery keep this default.

        Args:
            script_path: Receiver script (service worker) path.

        Raises:
            NotificationsUnsupportedError: If the host has no background receiver.
        """
        raise NotificationsUnsupportedError(
            "Background delivery is not supported on this platform",
            details={"script_path": script_path},
        )


class UnsupportedPlatform(PlatformCapabilities):
    """Platform for hosts with no notification capability."""

    @property
    def is_supported(self) -> bool:
        return False

    def permission(self) -> PermissionState:
        return PermissionState.UNSUPPORTED

    async def prompt_permission(self) -> PermissionState:
        raise NotificationsUnsupportedError("This platform does not support notifications")

    def show_notification(
        self,
        title: str,
        options: NotificationOptions,
        on_click: ClickHandler | None = None,
    ) -> NotificationHandle:
        raise NotificationsUnsupportedError("This platform does not support notifications")

    def focus(self) -> None:
        logger.debug("focus() ignored on unsupported platform")

    def navigate(self, url: str) -> None:
        logger.debug("navigate(%s) ignored on unsupported platform", url)
