# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Push notification lifecycle for the Onetime client.

This package manages one installation's push notifications:
- Permission: read and request the platform notification permission
- Messaging: mint FCM device tokens and receive foreground messages
- Registration: register device tokens and topics with the backend
- Lifecycle: orchestrate the above into one observable state

Key Components:
- NotificationLifecycle: Stateful orchestrator consumed by UI code
- RegistrationClient: HTTP client for /api/notifications
- PlatformCapabilities: Injected host notification API
- FirebaseMessagingClient: FCM receiver backing token minting and delivery
- TopicPreferences: Settings screen topic cache and status banner

Usage:
    from onetime_notifications.infrastructure.notifications import (
        create_notification_lifecycle,
    )

    lifecycle = create_notification_lifecycle(platform, auth_token=token)
    await lifecycle.initialize()
    granted = await lifecycle.request_permission()

Configuration (environment variables):
- API_BASE_URL: Backend base URL
- FIREBASE_API_KEY, FIREBASE_PROJECT_ID, FIREBASE_APP_ID,
  FIREBASE_MESSAGING_SENDER_ID: Firebase web app
- FIREBASE_VAPID_KEY: Public web push key (required for tokens)
- NOTIFICATIONS_ENABLE_BACKGROUND_DELIVERY: Register the background receiver
"""

from onetime_notifications.infrastructure.notifications.exceptions import (
    AuthenticationRequiredError,
    MessagingConfigurationError,
    NotificationError,
    NotificationsUnsupportedError,
    RegistrationError,
    TokenRetrievalError,
)
from onetime_notifications.infrastructure.notifications.firebase import (
    FirebaseMessagingClient,
)
from onetime_notifications.infrastructure.notifications.lifecycle import (
    NotificationLifecycle,
    create_notification_lifecycle,
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
    RegistrationResult,
    TopicSubscription,
)
from onetime_notifications.infrastructure.notifications.permission import PermissionGate
from onetime_notifications.infrastructure.notifications.platform import (
    NotificationHandle,
    NotificationOptions,
    PlatformCapabilities,
    UnsupportedPlatform,
)
from onetime_notifications.infrastructure.notifications.preferences import (
    AVAILABLE_TOPICS,
    StatusBanner,
    TopicPreferences,
)
from onetime_notifications.infrastructure.notifications.registration import (
    RegistrationClient,
)
from onetime_notifications.infrastructure.notifications.simple import SimpleNotifier

__all__ = [
    # Lifecycle
    "NotificationLifecycle",
    "create_notification_lifecycle",
    # Components
    "PermissionGate",
    "TokenProvider",
    "ForegroundListener",
    "RegistrationClient",
    "SimpleNotifier",
    "TopicPreferences",
    # Interfaces
    "MessagingClient",
    "FirebaseMessagingClient",
    "PlatformCapabilities",
    "UnsupportedPlatform",
    "NotificationHandle",
    "NotificationOptions",
    # Types
    "DevicePlatform",
    "ForegroundMessage",
    "NotificationLifecycleState",
    "PermissionState",
    "RegistrationResult",
    "StatusBanner",
    "TopicSubscription",
    "AVAILABLE_TOPICS",
    # Exceptions
    "NotificationError",
    "NotificationsUnsupportedError",
    "MessagingConfigurationError",
    "TokenRetrievalError",
    "AuthenticationRequiredError",
    "RegistrationError",
]
