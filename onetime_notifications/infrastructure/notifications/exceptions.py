# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Custom exceptions for the notification lifecycle.

This module defines the exception hierarchy for notification operations:
- NotificationError: Base exception for all notification errors
- NotificationsUnsupportedError: Host has no notification capability
- MessagingConfigurationError: Required messaging configuration is missing
- TokenRetrievalError: The messaging SDK failed while minting a token
- AuthenticationRequiredError: A backend action was attempted without a bearer token
- RegistrationError: The backend reported a failed registration call
"""


class NotificationError(Exception):
    """Base exception for all notification errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize notification error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotificationsUnsupportedError(NotificationError):
    """Raised when the host platform has no notification capability."""

    pass


class MessagingConfigurationError(NotificationError):
    """Raised when messaging is missing required configuration.

    This is a setup error (for example a missing VAPID key) and is not
    retryable without a configuration change.
    """

    pass


class TokenRetrievalError(NotificationError):
    """Raised when the messaging SDK fails while minting a device token."""

    pass


class AuthenticationRequiredError(NotificationError):
    """Raised when a backend action is attempted without a bearer token."""

    def __init__(self, message: str = "Authentication required", details: dict | None = None):
        super().__init__(message, details)


class RegistrationError(NotificationError):
    """Raised when the notifications API reports a failed call.

    Attributes:
        operation: Name of the registration client operation.
    """

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict | None = None,
    ):
        """Initialize registration error.

        Args:
            message: Error message reported by the server, verbatim.
            operation: Name of the registration client operation.
            details: Optional dictionary with additional error context.
        """
        self.operation = operation
        super().__init__(message, details)
