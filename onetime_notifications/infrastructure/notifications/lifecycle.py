# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification lifecycle orchestrator.

NotificationLifecycle ties the permission gate, token provider,
foreground listener and registration client into one stateful object
consumed by UI code. It owns the only copy of NotificationLifecycleState
and publishes a fresh snapshot to its listeners on every change.

Lifecycle:
    uninitialized -> initializing -> idle

    On initialize(), an unsupported platform settles immediately. Otherwise
    the background receiver is registered (when enabled), the current
    permission is read and, if already granted, a token is fetched and
    registered with the backend when a bearer token is set.

Error contract:
    User actions (request_permission, subscribe_to_topic,
    unsubscribe_from_topic, send_test_notification, unregister_device)
    raise a NotificationError on failure and mirror its message into
    ``state.error``. Each action clears ``state.error`` when it starts.
    A denied or unsupported permission is not a failure. initialize()
    only records errors in state.

Concurrency:
    Identical concurrent calls share one in-flight task, so repeated
    clicks collapse into a single network call. ``is_loading`` stays true
    while any operation is in flight.

Example:
    lifecycle = create_notification_lifecycle(platform, auth_token=access_token)
    remove = lifecycle.add_listener(lambda state: render(state))
    await lifecycle.initialize()

    if await lifecycle.request_permission():
        await lifecycle.subscribe_to_topic("job_alerts")

    remove()
    await lifecycle.close()
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any, TypeVar

from onetime_notifications.core.config.settings import Settings, get_settings
from onetime_notifications.infrastructure.notifications.exceptions import (
    AuthenticationRequiredError,
    NotificationError,
    RegistrationError,
)
from onetime_notifications.infrastructure.notifications.firebase import (
    FirebaseMessagingClient,
)
from onetime_notifications.infrastructure.notifications.messaging import (
    ForegroundListener,
    MessagingClient,
    TokenProvider,
)
from onetime_notifications.infrastructure.notifications.models import (
    DevicePlatform,
    ForegroundMessage,
    NotificationLifecycleState,
    PermissionState,
)
from onetime_notifications.infrastructure.notifications.permission import PermissionGate
from onetime_notifications.infrastructure.notifications.platform import (
    PlatformCapabilities,
    UnsupportedPlatform,
)
from onetime_notifications.infrastructure.notifications.registration import (
    RegistrationClient,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

StateListener = Callable[[NotificationLifecycleState], None]


class NotificationLifecycle:
    """Stateful push notification lifecycle for one installation.

    Attributes:
        state: Current immutable state snapshot.
    """

    def __init__(
        self,
        platform: PlatformCapabilities,
        messaging: MessagingClient,
        registration: RegistrationClient,
        settings: Settings | None = None,
        auth_token: str | None = None,
    ) -> None:
        """Initialize the lifecycle.

        Args:
            platform: Host platform notification capabilities.
            messaging: Push messaging SDK client.
            registration: Backend registration client.
            settings: Application settings (defaults to get_settings()).
            auth_token: Bearer token for backend calls, if already known.
        """
        self._settings = settings or get_settings()
        notification_settings = self._settings.notifications
        vapid_key = self._settings.firebase.vapid_key

        self._platform = platform
        self._messaging = messaging
        self._registration = registration
        self._gate = PermissionGate(platform)
        self._tokens = TokenProvider(
            messaging,
            vapid_key.get_secret_value() if vapid_key else None,
        )
        self._listener = ForegroundListener(
            messaging,
            platform,
            default_title=notification_settings.default_title,
            icon=notification_settings.icon,
            badge=notification_settings.badge,
        )
        self._device_platform = DevicePlatform(notification_settings.device_platform)

        self._state = NotificationLifecycleState(
            is_supported=platform.is_supported,
            permission=self._gate.current_permission(),
        )
        self._listeners: list[StateListener] = []
        self._in_flight: dict[str, asyncio.Future[Any]] = {}
        self._pending = 0

        if auth_token:
            self._registration.set_auth_token(auth_token)

    @property
    def state(self) -> NotificationLifecycleState:
        return self._state

    # =========================================================================
    # State
    # =========================================================================

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a callback invoked with each new state snapshot.

        Args:
            listener: Callback receiving the new state.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error("State listener failed: %s", str(e), exc_info=True)

    def _sync_permission(self) -> None:
        """Re-read the platform permission, dropping the token if revoked."""
        permission = self._gate.current_permission()
        if permission == PermissionState.GRANTED:
            self._update(permission=permission)
        else:
            self._update(permission=permission, token=None)

    def _record_error(self, error: NotificationError, context: str) -> NotificationError:
        logger.error("Failed to %s: %s", context, error.message)
        self._update(error=error.message)
        return error

    # =========================================================================
    # In-flight tracking
    # =========================================================================

    async def _tracked(self, operation: Callable[[], Awaitable[T]]) -> T:
        self._pending += 1
        self._update(is_loading=True)
        try:
            return await operation()
        finally:
            self._pending -= 1
            self._update(is_loading=self._pending > 0)

    async def _run_once(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` unless an identical call is already in flight.

        Args:
            key: Operation key; calls sharing a key share one task.
            operation: Coroutine factory to run.

        Returns:
            The operation's result.
        """
        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._tracked(operation))
            self._in_flight[key] = task

            def _forget(done: asyncio.Future[Any]) -> None:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

            task.add_done_callback(_forget)
        else:
            logger.debug("Joining in-flight operation: %s", key)

        return await asyncio.shield(task)

    async def _action(
        self,
        key: str,
        context: str,
        operation: Callable[[], Awaitable[T]],
    ) -> T:
        """Run a user action under the shared error contract."""

        async def run() -> T:
            self._update(error=None)
            try:
                return await operation()
            except NotificationError as e:
                self._record_error(e, context)
                raise
            except Exception as e:
                error = NotificationError(
                    str(e) or type(e).__name__,
                    details={"error_type": type(e).__name__},
                )
                raise self._record_error(error, context) from e

        return await self._run_once(key, run)

    # =========================================================================
    # Initialization
    # =========================================================================

    async def initialize(self) -> NotificationLifecycleState:
        """Bring the lifecycle up to date with the platform.

        Safe to call again, for example after the bearer token changes.
        Errors are recorded in ``state.error`` and never raised.

        Returns:
            The state after initialization.
        """
        if not self._gate.is_supported:
            self._update(is_supported=False, permission=PermissionState.UNSUPPORTED, token=None)
            return self._state

        self._update(is_supported=True)
        await self._run_once("initialize", self._initialize)
        return self._state

    async def _initialize(self) -> None:
        self._update(error=None)
        try:
            if self._settings.notifications.enable_background_delivery:
                await self._register_background_receiver()
            else:
                logger.debug("Background delivery is disabled")

            if self._gate.current_permission() == PermissionState.GRANTED:
                await self._acquire_token()

        except Exception as e:
            logger.error("Failed to initialize notifications: %s", str(e))
            message = e.message if isinstance(e, NotificationError) else str(e)
            self._update(error=message or type(e).__name__)

        finally:
            self._sync_permission()

    async def _register_background_receiver(self) -> None:
        script_path = self._settings.notifications.service_worker_path
        try:
            await self._platform.register_background_receiver(script_path)
            logger.info("Background receiver registered: %s", script_path)
        except Exception as e:
            logger.error("Background receiver registration failed: %s", str(e))

    async def _acquire_token(self) -> str | None:
        """Fetch a token, start foreground delivery and sync it to the backend.

        Registration is attempted only after a token has been obtained.
        """
        token = await self._tokens.get_token()
        if not token:
            return None

        self._update(token=token, permission=PermissionState.GRANTED)
        self._listener.listen(self._handle_message)

        if self._registration.has_auth_token:
            await self._register_token(token)
        return token

    async def _register_token(self, token: str) -> bool:
        """Register ``token`` with the backend; failures are only logged."""
        result = await self._registration.register_device_token(token, self._device_platform)
        if not result.success:
            logger.error("Failed to register token with server: %s", result.error)
            return False
        logger.info("Device token registered with server")
        return True

    def _handle_message(self, message: ForegroundMessage) -> None:
        self._update(last_message=message)
        self._listener.show_notification(message)

    # =========================================================================
    # Actions
    # =========================================================================

    def _require_auth(self) -> None:
        if not self._registration.has_auth_token:
            raise AuthenticationRequiredError()

    async def set_auth_token(self, auth_token: str | None) -> None:
        """Set the bearer token and sync the current device token with it.

        Args:
            auth_token: New bearer token, or None to sign out.
        """
        self._registration.set_auth_token(auth_token)
        if auth_token and self._state.token:
            await self._register_token(self._state.token)

    async def request_permission(self) -> bool:
        """Ask the user for notification permission.

        On a grant a device token is fetched and, when a bearer token is
        set, registered with the backend. A failed registration is logged
        and does not undo the local grant.

        Returns:
            True if permission was granted.

        Raises:
            NotificationError: If fetching the token failed.
        """

        async def operation() -> bool:
            granted = await self._gate.request_permission()
            try:
                if granted:
                    await self._acquire_token()
            finally:
                self._sync_permission()
            return granted

        return await self._action(
            "request_permission",
            "request notification permission",
            operation,
        )

    async def send_test_notification(
        self,
        notification_type: str,
        data: dict[str, Any] | None = None,
    ) -> None:
        """Ask the backend to push a test notification.

        Raises:
            AuthenticationRequiredError: If no bearer token is set.
            RegistrationError: With the server's message if the call failed.
        """

        async def operation() -> None:
            self._require_auth()
            result = await self._registration.send_test_notification(notification_type, data)
            if not result.success:
                raise RegistrationError(
                    result.error or "Failed to send test notification",
                    operation="send_test_notification",
                )
            logger.info("Test notification sent successfully")

        await self._action(
            f"test:{notification_type}",
            "send test notification",
            operation,
        )

    async def subscribe_to_topic(self, topic: str) -> bool:
        """Subscribe this user to ``topic``.

        The caller flips its own topic cache only after this returns True.

        Raises:
            AuthenticationRequiredError: If no bearer token is set.
            RegistrationError: With the server's message if the call failed.
        """

        async def operation() -> bool:
            self._require_auth()
            result = await self._registration.subscribe_to_topic(topic)
            if not result.success:
                raise RegistrationError(
                    result.error or "Failed to subscribe to topic",
                    operation="subscribe_to_topic",
                )
            logger.info("Successfully subscribed to topic: %s", topic)
            return True

        return await self._action(
            f"subscribe:{topic}",
            f"subscribe to topic {topic}",
            operation,
        )

    async def unsubscribe_from_topic(self, topic: str) -> bool:
        """Unsubscribe this user from ``topic``.

        Raises:
            AuthenticationRequiredError: If no bearer token is set.
            RegistrationError: With the server's message if the call failed.
        """

        async def operation() -> bool:
            self._require_auth()
            result = await self._registration.unsubscribe_from_topic(topic)
            if not result.success:
                raise RegistrationError(
                    result.error or "Failed to unsubscribe from topic",
                    operation="unsubscribe_from_topic",
                )
            logger.info("Successfully unsubscribed from topic: %s", topic)
            return True

        return await self._action(
            f"unsubscribe:{topic}",
            f"unsubscribe from topic {topic}",
            operation,
        )

    async def unregister_device(self) -> bool:
        """Remove this device's token from the backend and forget it.

        Returns:
            True if a token was unregistered, False if there was none.

        Raises:
            AuthenticationRequiredError: If no bearer token is set.
            RegistrationError: With the server's message if the call failed.
        """

        async def operation() -> bool:
            self._require_auth()
            token = self._state.token
            if not token:
                return False

            result = await self._registration.unregister_device_token(token)
            if not result.success:
                raise RegistrationError(
                    result.error or "Failed to unregister device token",
                    operation="unregister_device_token",
                )
            self._update(token=None)
            logger.info("Device token unregistered")
            return True

        return await self._action("unregister_device", "unregister device token", operation)

    async def close(self) -> None:
        """Stop the messaging client and close the registration client."""
        try:
            await self._messaging.stop()
        finally:
            await self._registration.aclose()


def create_notification_lifecycle(
    platform: PlatformCapabilities | None = None,
    settings: Settings | None = None,
    auth_token: str | None = None,
) -> NotificationLifecycle:
    """Build a lifecycle wired to Firebase and the configured backend.

    Args:
        platform: Host platform capabilities (defaults to UnsupportedPlatform).
        settings: Application settings (defaults to get_settings()).
        auth_token: Bearer token for backend calls.

    Returns:
        A new, uninitialized NotificationLifecycle.
    """
    settings = settings or get_settings()
    return NotificationLifecycle(
        platform=platform or UnsupportedPlatform(),
        messaging=FirebaseMessagingClient(settings.firebase),
        registration=RegistrationClient(
            base_url=settings.api.base_url,
            timeout=settings.api.timeout,
        ),
        settings=settings,
        auth_token=auth_token,
    )
