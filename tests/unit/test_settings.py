# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for application settings."""

import os
from unittest.mock import patch

import pytest

from onetime_notifications.core.config.settings import (
    ApiSettings,
    FirebaseSettings,
    NotificationSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


class TestApiSettings:
    """Tests for ApiSettings."""

    def test_default_values(self) -> None:
        """Test default configuration values."""
        with patch.dict(os.environ, {}, clear=True):
            settings = ApiSettings()

        assert settings.base_url == "https://onetime-production.up.railway.app"
        assert settings.timeout == 30.0

    def test_loads_from_environment(self) -> None:
        """Test that settings load from environment variables."""
        env = {
            "API_BASE_URL": "http://localhost:4000",
            "API_TIMEOUT": "5",
        }

        with patch.dict(os.environ, env, clear=False):
            settings = ApiSettings()

        assert settings.base_url == "http://localhost:4000"
        assert settings.timeout == 5.0


class TestFirebaseSettings:
    """Tests for FirebaseSettings."""

    def test_unconfigured_by_default(self) -> None:
        """Test that nothing is configured without environment."""
        with patch.dict(os.environ, {}, clear=True):
            settings = FirebaseSettings()

        assert settings.is_configured is False
        assert settings.vapid_key is None

    def test_vapid_key_is_secret(self) -> None:
        """Test that the VAPID key is loaded as a secret."""
        with patch.dict(os.environ, {"FIREBASE_VAPID_KEY": "BJx-public-key"}, clear=False):
            settings = FirebaseSettings()

        assert settings.vapid_key.get_secret_value() == "BJx-public-key"
        assert "BJx-public-key" not in repr(settings)

    def test_is_configured(self) -> None:
        """Test that registration fields make the app configured."""
        settings = FirebaseSettings(
            api_key="key",  # type: ignore[arg-type]
            project_id="onetime",
            app_id="1:1:web:1",
            messaging_sender_id="1",
        )

        assert settings.is_configured is True


class TestNotificationSettings:
    """Tests for NotificationSettings."""

    def test_background_delivery_off_by_default(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = NotificationSettings()

        assert settings.enable_background_delivery is False
        assert settings.service_worker_path == "/firebase-messaging-sw.js"
        assert settings.device_platform == "web"

    def test_background_delivery_from_environment(self) -> None:
        env = {"NOTIFICATIONS_ENABLE_BACKGROUND_DELIVERY": "true"}

        with patch.dict(os.environ, env, clear=False):
            settings = NotificationSettings()

        assert settings.enable_background_delivery is True


class TestSettings:
    """Tests for the main Settings class."""

    def test_production_requires_https(self) -> None:
        """Test that production rejects a plain HTTP backend."""
        with pytest.raises(ValueError, match="HTTPS"):
            Settings(
                environment="production",
                api=ApiSettings(base_url="http://insecure.example.com"),
            )

    def test_production_with_https(self) -> None:
        settings = Settings(
            environment="production",
            api=ApiSettings(base_url="https://api.example.com"),
        )

        assert settings.is_production is True
        assert settings.is_development is False

    def test_get_settings_is_cached(self) -> None:
        """Test that get_settings returns a cached instance."""
        clear_settings_cache()

        first = get_settings()
        second = get_settings()

        assert first is second

    def test_clear_settings_cache(self) -> None:
        """Test that clearing the cache yields a fresh instance."""
        first = get_settings()
        clear_settings_cache()

        second = get_settings()

        assert first is not second
