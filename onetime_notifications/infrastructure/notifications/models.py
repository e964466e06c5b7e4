# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared types for the notification lifecycle.

Contains the permission and platform enums, the uniform result shape
returned by the registration client, inbound foreground messages and
the aggregate lifecycle state observed by UI consumers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PermissionState(str, Enum):
    """Notification permission as reported by the host platform."""

    UNSUPPORTED = "unsupported"
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class DevicePlatform(str, Enum):
    """Platform reported when registering a device token."""

    WEB = "web"
    IOS = "ios"
    ANDROID = "android"


@dataclass
class RegistrationResult:
    """Result of a registration client call.

    Every backend call resolves to this shape; failures are reported
    through ``success`` and ``error`` rather than raised.

    Attributes:
        success: Whether the server reported success.
        data: Response payload, if any.
        error: Error message when the call failed.
        message: Informational message from the server.
    """

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def from_response(cls, body: Any) -> "RegistrationResult":
        """Build a result from a decoded ``{success, data, error}`` body.

        Args:
            body: Decoded JSON response body.

        Returns:
            RegistrationResult mirroring the body. A body that is not an
            object, or has no ``success`` flag, is a failure.
        """
        if not isinstance(body, dict):
            return cls.failure(f"Unexpected response body: {type(body).__name__}")
        return cls(
            success=bool(body.get("success", False)),
            data=body.get("data"),
            error=body.get("error"),
            message=body.get("message"),
        )

    @classmethod
    def failure(cls, error: str) -> "RegistrationResult":
        """Build a failed result carrying ``error``."""
        return cls(success=False, error=error)


@dataclass
class ForegroundMessage:
    """A push message delivered while the application has focus.

    Attributes:
        title: Notification title.
        body: Notification body text.
        image: Optional image/icon URL from the payload.
        data: Custom data fields (``actionUrl`` is used on click).
        message_id: Messaging SDK message identifier, if provided.
    """

    title: str
    body: str = ""
    image: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    message_id: str | None = None

    @property
    def action_url(self) -> str | None:
        """URL to open when the notification is clicked."""
        return self.data.get("actionUrl") or None

    @classmethod
    def from_payload(cls, payload: dict[str, Any], default_title: str) -> "ForegroundMessage":
        """Parse a raw messaging SDK payload.

        Args:
            payload: Raw payload with optional ``notification`` and ``data`` keys.
            default_title: Title to use when the payload carries none.

        Returns:
            Parsed ForegroundMessage.
        """
        notification = payload.get("notification") or {}
        data = payload.get("data") or {}
        return cls(
            title=notification.get("title") or default_title,
            body=notification.get("body") or "",
            image=notification.get("image"),
            data=dict(data),
            message_id=payload.get("messageId") or payload.get("fcmMessageId"),
        )


@dataclass(frozen=True)
class NotificationLifecycleState:
    """Snapshot of the notification lifecycle.

    A new snapshot replaces the previous one on every change, so
    consumers can hold on to a snapshot without it mutating underneath.

    Invariants:
        ``token`` is set only while ``permission`` is GRANTED.
        ``is_loading`` is true only while an operation is in flight.

    Attributes:
        is_supported: Whether the host supports notifications at all.
        permission: Current permission state.
        token: Device push token, if one has been minted.
        is_loading: Whether a lifecycle operation is in flight.
        error: Message of the most recent failure.
        last_message: Most recent foreground message.
    """

    is_supported: bool = False
    permission: PermissionState = PermissionState.UNSUPPORTED
    token: str | None = None
    is_loading: bool = False
    error: str | None = None
    last_message: ForegroundMessage | None = None


@dataclass
class TopicSubscription:
    """Client-side cache of one server-side topic subscription.

    Attributes:
        topic: Topic name known to the backend.
        label: Display label.
        description: Display description.
        subscribed: Whether the user is subscribed, as last confirmed by the server.
    """

    topic: str
    label: str
    description: str = ""
    subscribed: bool = False
