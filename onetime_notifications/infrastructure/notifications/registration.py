# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Registration client for the Onetime notifications API.

This module provides an async HTTP client that registers device tokens
and manages topic subscriptions against the backend.

The client handles:
- Device token registration and removal
- Listing the user's registered device tokens
- Sending test notifications
- Topic subscribe/unsubscribe

Every call resolves to a RegistrationResult and never raises: network
and server errors are logged and normalized into ``success=False``.

Example:
    async with RegistrationClient(base_url="https://api.example.com") as client:
        client.set_auth_token(access_token)
        result = await client.register_device_token("fcm-token", DevicePlatform.WEB)
        if not result.success:
            print(result.error)
"""

import logging
from typing import Any

import httpx
from pydantic_core import PydanticSerializationError, to_jsonable_python

from onetime_notifications.infrastructure.notifications.models import (
    DevicePlatform,
    RegistrationResult,
)

logger = logging.getLogger(__name__)

NOTIFICATIONS_PATH = "/api/notifications"


class RegistrationClient:
    """Async HTTP client for the notifications API.

    Authentication is not enforced locally: without a bearer token the
    Authorization header is simply omitted and the backend decides.

    Attributes:
        base_url: Base URL of the backend.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the registration client.

        Args:
            base_url: Base URL of the backend.
            timeout: Request timeout in seconds.
            http_client: Optional preconfigured client. It is not closed by
                aclose(); its owner is responsible for that.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._auth_token: str | None = None
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "RegistrationClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def has_auth_token(self) -> bool:
        """Whether a bearer token has been set."""
        return bool(self._auth_token)

    def set_auth_token(self, token: str | None) -> None:
        """Set (or clear, with None) the bearer token sent with each call."""
        self._auth_token = token or None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests.

        Returns:
            Dictionary of HTTP headers.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._auth_token:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        return headers

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: dict[str, Any] | None = None,
    ) -> RegistrationResult:
        """Send a request and normalize the outcome.

        Args:
            method: HTTP method.
            path: Path below /api/notifications.
            operation: Operation name used in log messages.
            json: Optional JSON body.

        Returns:
            RegistrationResult for the call.
        """
        url = f"{self.base_url}{NOTIFICATIONS_PATH}{path}"

        try:
            payload = to_jsonable_python(json) if json is not None else None
        except PydanticSerializationError as e:
            logger.error("Failed to %s: invalid request body: %s", operation, str(e))
            return RegistrationResult.failure(f"Invalid request body: {str(e)}")

        try:
            response = await self._get_client().request(
                method,
                url,
                json=payload,
                headers=self._get_headers(),
            )
            response.raise_for_status()
            return RegistrationResult.from_response(response.json())

        except httpx.HTTPStatusError as e:
            error_message = _error_from_response(e.response) or str(e)
            logger.error(
                "Failed to %s (%d): %s",
                operation,
                e.response.status_code,
                error_message,
            )
            return RegistrationResult.failure(error_message)

        except httpx.HTTPError as e:
            logger.error("Failed to %s: %s", operation, str(e))
            return RegistrationResult.failure(str(e) or type(e).__name__)

        except ValueError as e:
            logger.error("Failed to %s: invalid response body: %s", operation, str(e))
            return RegistrationResult.failure(f"Invalid response body: {str(e)}")

    async def register_device_token(
        self,
        token: str,
        platform: DevicePlatform | str = DevicePlatform.WEB,
    ) -> RegistrationResult:
        """Register a device token for the authenticated user.

        Args:
            token: Device push token.
            platform: Platform the token belongs to.

        Returns:
            RegistrationResult with the stored registration in ``data``.
        """
        return await self._request(
            "POST",
            "/device-token",
            "register device token",
            json={"token": token, "platform": DevicePlatform(platform).value},
        )

    async def unregister_device_token(self, token: str) -> RegistrationResult:
        """Remove a device token from the authenticated user.

        Calling this twice with the same token is safe; the second call
        reports whatever the server answers for an unknown token.
        """
        return await self._request(
            "DELETE",
            "/device-token",
            "unregister device token",
            json={"token": token},
        )

    async def list_device_tokens(self) -> RegistrationResult:
        """List the authenticated user's device tokens.

        Returns:
            RegistrationResult with the list of tokens in ``data``.
        """
        return await self._request("GET", "/device-tokens", "list device tokens")

    async def send_test_notification(
        self,
        notification_type: str,
        data: dict[str, Any] | None = None,
    ) -> RegistrationResult:
        """Ask the backend to push a test notification to this user.

        Args:
            notification_type: Notification type (e.g. "SYSTEM").
            data: Notification data fields.
        """
        return await self._request(
            "POST",
            "/test",
            "send test notification",
            json={"type": notification_type, "data": data or {}},
        )

    async def subscribe_to_topic(self, topic: str) -> RegistrationResult:
        """Subscribe the authenticated user's devices to ``topic``."""
        return await self._request(
            "POST",
            "/topics/subscribe",
            "subscribe to topic",
            json={"topic": topic},
        )

    async def unsubscribe_from_topic(self, topic: str) -> RegistrationResult:
        """Unsubscribe the authenticated user's devices from ``topic``."""
        return await self._request(
            "POST",
            "/topics/unsubscribe",
            "unsubscribe from topic",
            json={"topic": topic},
        )


def _error_from_response(response: httpx.Response) -> str | None:
    """Extract the server's error message from a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or None

    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None
