# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fakes for the injected platform and messaging
interfaces, plus a recording HTTP backend for the registration client.
"""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import httpx
import pytest
import pytest_asyncio

from onetime_notifications.core.config.settings import (
    ApiSettings,
    FirebaseSettings,
    NotificationSettings,
    Settings,
)
from onetime_notifications.infrastructure.notifications.lifecycle import (
    NotificationLifecycle,
)
from onetime_notifications.infrastructure.notifications.messaging import (
    MessagingClient,
    PayloadCallback,
)
from onetime_notifications.infrastructure.notifications.models import PermissionState
from onetime_notifications.infrastructure.notifications.platform import (
    ClickHandler,
    NotificationHandle,
    NotificationOptions,
    PlatformCapabilities,
)
from onetime_notifications.infrastructure.notifications.registration import (
    RegistrationClient,
)

BASE_URL = "https://api.onetime.test"


# =============================================================================
# Fakes
# =============================================================================


class FakeHandle(NotificationHandle):
    """Notification shown by FakePlatform."""

    def __init__(
        self,
        title: str,
        options: NotificationOptions,
        on_click: ClickHandler | None,
    ) -> None:
        self.title = title
        self.options = options
        self.on_click = on_click
        self.closed = False

    def close(self) -> None:
        self.closed = True

    def click(self) -> None:
        if self.on_click:
            self.on_click(self)


class FakePlatform(PlatformCapabilities):
    """In-memory platform recording prompts and displayed notifications."""

    def __init__(
        self,
        permission: PermissionState = PermissionState.DEFAULT,
        prompt_result: PermissionState = PermissionState.GRANTED,
        supported: bool = True,
        receiver_error: Exception | None = None,
    ) -> None:
        self._permission = permission
        self.supported = supported
        self.prompt_result = prompt_result
        self.receiver_error = receiver_error
        self.prompt_count = 0
        self.shown: list[FakeHandle] = []
        self.focus_count = 0
        self.navigated: list[str] = []
        self.receivers: list[str] = []

    @property
    def is_supported(self) -> bool:
        return self.supported

    def permission(self) -> PermissionState:
        return self._permission

    def set_permission(self, permission: PermissionState) -> None:
        self._permission = permission

    async def prompt_permission(self) -> PermissionState:
        self.prompt_count += 1
        self._permission = self.prompt_result
        return self.prompt_result

    def show_notification(
        self,
        title: str,
        options: NotificationOptions,
        on_click: ClickHandler | None = None,
    ) -> NotificationHandle:
        handle = FakeHandle(title, options, on_click)
        self.shown.append(handle)
        return handle

    def focus(self) -> None:
        self.focus_count += 1

    def navigate(self, url: str) -> None:
        self.navigated.append(url)

    async def register_background_receiver(self, script_path: str) -> None:
        if self.receiver_error:
            raise self.receiver_error
        self.receivers.append(script_path)


class FakeMessaging(MessagingClient):
    """In-memory messaging SDK that mints a fixed token."""

    def __init__(
        self,
        token: str | None = "tok-123",
        available: bool = True,
        error: Exception | None = None,
    ) -> None:
        self.token = token
        self.available = available
        self.error = error
        self.callbacks: list[PayloadCallback] = []
        self.token_requests: list[str] = []
        self.stopped = False

    @property
    def is_available(self) -> bool:
        return self.available

    async def get_token(self, vapid_key: str) -> str | None:
        self.token_requests.append(vapid_key)
        if self.error:
            raise self.error
        return self.token

    def on_message(self, callback: PayloadCallback) -> None:
        self.callbacks.append(callback)

    def deliver(self, payload: dict[str, Any]) -> None:
        for callback in self.callbacks:
            callback(payload)

    async def stop(self) -> None:
        self.stopped = True


class RecordingBackend:
    """httpx MockTransport handler that records requests.

    Responses default to ``200 {"success": true}`` and can be overridden
    per (method, path).
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: dict[tuple[str, str], tuple[int, dict[str, Any]]] = {}

    def respond(self, method: str, path: str, status_code: int = 200, **kwargs: Any) -> None:
        self._responses[(method, path)] = (status_code, kwargs)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, kwargs = self._responses.get(
            (request.method, request.url.path),
            (200, {"json": {"success": True}}),
        )
        return httpx.Response(status_code, **kwargs)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings with a configured VAPID key and background delivery off."""
    return Settings(
        api=ApiSettings(base_url=BASE_URL),
        firebase=FirebaseSettings(vapid_key="test-vapid-key"),  # type: ignore[arg-type]
        notifications=NotificationSettings(enable_background_delivery=False),
    )


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def messaging() -> FakeMessaging:
    return FakeMessaging()


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest_asyncio.fixture
async def http_client(backend: RecordingBackend) -> AsyncGenerator[httpx.AsyncClient, None]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler))
    yield client
    await client.aclose()


@pytest.fixture
def registration(http_client: httpx.AsyncClient) -> RegistrationClient:
    return RegistrationClient(base_url=BASE_URL, http_client=http_client)


@pytest.fixture
def make_lifecycle(
    platform: FakePlatform,
    messaging: FakeMessaging,
    registration: RegistrationClient,
    settings: Settings,
) -> Callable[..., NotificationLifecycle]:
    """Factory building a lifecycle from the shared fakes.

    Keyword arguments override any constructor argument.
    """

    def _make(**overrides: Any) -> NotificationLifecycle:
        kwargs: dict[str, Any] = {
            "platform": platform,
            "messaging": messaging,
            "registration": registration,
            "settings": settings,
        }
        kwargs.update(overrides)
        return NotificationLifecycle(**kwargs)

    return _make


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
