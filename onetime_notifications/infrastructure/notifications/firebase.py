# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Firebase Cloud Messaging client using the firebase-messaging package.

Registers this installation with FCM as a web push receiver, which yields
the device token the backend sends to, and keeps a connection open to
receive messages while the application runs.

Configuration comes from FirebaseSettings (FIREBASE_* environment
variables). Nothing is created at import time: construct one client per
application and call stop() on shutdown.
"""

import logging
from typing import Any

from firebase_messaging import FcmPushClient, FcmRegisterConfig

from onetime_notifications.core.config.settings import FirebaseSettings
from onetime_notifications.infrastructure.notifications.messaging import (
    MessagingClient,
    PayloadCallback,
)

logger = logging.getLogger(__name__)


class FirebaseMessagingClient(MessagingClient):
    """MessagingClient backed by an FcmPushClient.

    The FCM registration is created lazily on the first get_token() call,
    because the VAPID key is part of the registration.

    Attributes:
        credentials: FCM credentials from the last check-in, if any.
    """

    def __init__(
        self,
        settings: FirebaseSettings,
        credentials: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            settings: Firebase web app settings.
            credentials: Previously issued FCM credentials to reuse.
        """
        self._settings = settings
        self.credentials = credentials
        self._client: FcmPushClient | None = None
        self._callbacks: list[PayloadCallback] = []
        self._started = False

    @property
    def is_available(self) -> bool:
        return self._settings.is_configured

    def _build_config(self, vapid_key: str) -> FcmRegisterConfig:
        api_key = self._settings.api_key
        return FcmRegisterConfig(
            project_id=self._settings.project_id,
            app_id=self._settings.app_id,
            api_key=api_key.get_secret_value() if api_key else "",
            messaging_sender_id=self._settings.messaging_sender_id,
            vapid_key=vapid_key,
        )

    def _on_credentials_updated(self, credentials: dict[str, Any]) -> None:
        logger.info("FCM credentials updated")
        self.credentials = credentials

    def _on_notification(
        self,
        notification: dict[str, Any],
        persistent_id: str,
        context: Any = None,
    ) -> None:
        payload = dict(notification)
        payload.setdefault("messageId", persistent_id)
        for callback in self._callbacks:
            callback(payload)

    async def get_token(self, vapid_key: str) -> str | None:
        if self._client is None:
            self._client = FcmPushClient(
                self._on_notification,
                self._build_config(vapid_key),
                self.credentials,
                self._on_credentials_updated,
            )

        token = await self._client.checkin_or_register()
        await self.start()
        return token or None

    def on_message(self, callback: PayloadCallback) -> None:
        self._callbacks.append(callback)

    async def start(self) -> None:
        if self._client is None or self._started:
            return
        await self._client.start()
        self._started = True
        logger.info("FCM receiver started for project %s", self._settings.project_id)

    async def stop(self) -> None:
        if self._client is None or not self._started:
            return
        await self._client.stop()
        self._started = False
        logger.info("FCM receiver stopped")
