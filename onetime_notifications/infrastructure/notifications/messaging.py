# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Push messaging: device token minting and foreground delivery.

This module defines the MessagingClient interface over a push messaging
SDK, and the two thin components built on it:

- TokenProvider: mints device push tokens with the configured VAPID key
- ForegroundListener: receives messages while the app has focus and
  renders them as local notifications

Example:
    messaging = FirebaseMessagingClient(settings.firebase)
    tokens = TokenProvider(messaging, vapid_key="BJ...")
    token = await tokens.get_token()

    listener = ForegroundListener(messaging, platform)
    listener.listen()
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from onetime_notifications.infrastructure.notifications.exceptions import (
    MessagingConfigurationError,
    TokenRetrievalError,
)
from onetime_notifications.infrastructure.notifications.models import (
    ForegroundMessage,
    PermissionState,
)
from onetime_notifications.infrastructure.notifications.platform import (
    NotificationHandle,
    NotificationOptions,
    PlatformCapabilities,
)

logger = logging.getLogger(__name__)

PayloadCallback = Callable[[dict[str, Any]], None]
MessageCallback = Callable[[ForegroundMessage], None]


class MessagingClient(ABC):
    """Abstract push messaging SDK.

    Implementations own the SDK connection and are constructed and torn
    down explicitly, so tests can substitute a fake per test.
    """

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the SDK can be used in this environment."""
        ...

    @abstractmethod
    async def get_token(self, vapid_key: str) -> str | None:
        """Mint (or return the current) device push token.

        Args:
            vapid_key: Public web push key.

        Returns:
            Token string, or None if the SDK declined to mint one.
        """
        ...

    @abstractmethod
    def on_message(self, callback: PayloadCallback) -> None:
        """Register the foreground message callback."""
        ...

    async def start(self) -> None:
        """Open the SDK connection."""

    async def stop(self) -> None:
        """Close the SDK connection."""


class TokenProvider:
    """Mints device push tokens.

    Permission must already be granted; that is the caller's concern.
    Tokens are never cached here: the SDK may rotate them, so callers
    fetch again whenever they need one.
    """

    def __init__(self, messaging: MessagingClient, vapid_key: str | None) -> None:
        self._messaging = messaging
        self._vapid_key = vapid_key

    async def get_token(self) -> str | None:
        """Fetch the device push token.

        Returns:
            The token, or None when the SDK is unavailable or declines.

        Raises:
            MessagingConfigurationError: If no VAPID key is configured.
            TokenRetrievalError: If the SDK fails while minting.
        """
        if not self._vapid_key:
            raise MessagingConfigurationError("VAPID key is not configured")

        if not self._messaging.is_available:
            logger.warning("Push messaging is not available")
            return None

        try:
            token = await self._messaging.get_token(self._vapid_key)
        except Exception as e:
            logger.error("An error occurred while retrieving token: %s", str(e))
            raise TokenRetrievalError(
                f"Failed to retrieve push token: {str(e)}",
                details={"error_type": type(e).__name__},
            ) from e

        if not token:
            logger.info("No registration token available")
            return None

        logger.debug("Push token generated: %s...", token[:20])
        return token


class ForegroundListener:
    """Delivers foreground messages and renders local notifications.

    Exactly one callback is registered for the lifetime of the messaging
    client; later calls to listen() are ignored.
    """

    def __init__(
        self,
        messaging: MessagingClient,
        platform: PlatformCapabilities,
        default_title: str = "새 알림",
        icon: str = "/icon-192x192.png",
        badge: str = "/badge-72x72.png",
    ) -> None:
        self._messaging = messaging
        self._platform = platform
        self._default_title = default_title
        self._icon = icon
        self._badge = badge
        self._listening = False

    @property
    def is_listening(self) -> bool:
        return self._listening

    def listen(self, on_message: MessageCallback | None = None) -> bool:
        """Register the foreground message callback.

        Args:
            on_message: Called once per inbound message. Defaults to
                rendering a local notification.

        Returns:
            True if the callback was registered by this call.
        """
        if not self._messaging.is_available:
            logger.warning("Push messaging is not available")
            return False

        if self._listening:
            logger.debug("Foreground listener already registered")
            return False

        callback = on_message or self.show_notification

        def _dispatch(payload: dict[str, Any]) -> None:
            logger.info("Message received in foreground: %s", payload.get("notification"))
            message = ForegroundMessage.from_payload(payload, self._default_title)
            try:
                callback(message)
            except Exception as e:
                logger.error("Foreground message handler failed: %s", str(e), exc_info=True)

        self._messaging.on_message(_dispatch)
        self._listening = True
        return True

    def show_notification(self, message: ForegroundMessage) -> NotificationHandle | None:
        """Render ``message`` as a local notification.

        Clicking the notification focuses the app, closes the notification
        and navigates to the message's action URL when it carries one.

        Args:
            message: Parsed foreground message.

        Returns:
            The displayed notification, or None if it could not be shown.
        """
        if not self._platform.is_supported:
            logger.warning("This platform does not support notifications")
            return None

        if self._platform.permission() != PermissionState.GRANTED:
            logger.warning("Notification permission is not granted")
            return None

        action_url = message.action_url

        def _on_click(handle: NotificationHandle) -> None:
            self._platform.focus()
            handle.close()
            if action_url:
                self._platform.navigate(action_url)

        options = NotificationOptions(
            body=message.body,
            icon=message.image or self._icon,
            badge=self._badge,
            data=message.data,
        )
        return self._platform.show_notification(message.title, options, on_click=_on_click)
