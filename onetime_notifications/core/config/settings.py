# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Application configuration settings using Pydantic Settings.

This module provides centralized configuration for the Onetime push
notification client. Settings are loaded from environment variables with
sensible defaults.

The Settings class is the main entry point and aggregates all subsettings.
A singleton instance is provided via get_settings() for dependency injection.

Example:
    >>> from onetime_notifications.core.config.settings import get_settings
    >>> settings = get_settings()
    >>> print(settings.api.base_url)
    'https://onetime-production.up.railway.app'
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Onetime backend API configuration.

    Attributes:
        base_url: Base URL of the backend serving /api/notifications.
        timeout: Request timeout in seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix="API_",
        extra="ignore",
    )

    base_url: str = "https://onetime-production.up.railway.app"
    timeout: float = 30.0


class FirebaseSettings(BaseSettings):
    """Firebase web app configuration.

    Mirrors the Firebase console's web app snippet. The VAPID key is the
    public key used to mint web push tokens and is required before any
    token can be fetched.

    Attributes:
        api_key: Firebase web API key.
        auth_domain: Firebase auth domain.
        project_id: Firebase project ID.
        storage_bucket: Firebase storage bucket.
        messaging_sender_id: Cloud Messaging sender ID.
        app_id: Firebase app ID.
        measurement_id: Analytics measurement ID.
        vapid_key: Public web push (VAPID) key.
    """

    model_config = SettingsConfigDict(
        env_prefix="FIREBASE_",
        extra="ignore",
    )

    api_key: SecretStr | None = None
    auth_domain: str | None = None
    project_id: str | None = None
    storage_bucket: str | None = None
    messaging_sender_id: str | None = None
    app_id: str | None = None
    measurement_id: str | None = None
    vapid_key: SecretStr | None = None

    @property
    def is_configured(self) -> bool:
        """Check whether the fields needed to register with FCM are set."""
        return bool(
            self.api_key
            and self.project_id
            and self.app_id
            and self.messaging_sender_id
        )


class NotificationSettings(BaseSettings):
    """Client-side notification behaviour.

    Attributes:
        enable_background_delivery: Register the background receiver
            (service worker) on initialization.
        service_worker_path: Script path handed to the background receiver.
        default_title: Title used when an inbound message has none.
        icon: Icon shown on local notifications.
        badge: Badge shown on local notifications.
        device_platform: Platform reported when registering the token.
    """

    model_config = SettingsConfigDict(
        env_prefix="NOTIFICATIONS_",
        extra="ignore",
    )

    enable_background_delivery: bool = False
    service_worker_path: str = "/firebase-messaging-sw.js"
    default_title: str = "새 알림"
    icon: str = "/icon-192x192.png"
    badge: str = "/badge-72x72.png"
    device_platform: Literal["web", "ios", "android"] = "web"


class Settings(BaseSettings):
    """Main application settings aggregating all subsettings.

    Use get_settings() to obtain a cached singleton instance.

    Attributes:
        environment: Current environment (development, staging, production).
        debug: Enable debug mode.
        log_level: Logging level.
        api: Backend API settings.
        firebase: Firebase web app settings.
        notifications: Client notification behaviour.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "DEBUG"

    # Subsettings - loaded with their own env prefixes
    api: ApiSettings = Field(default_factory=ApiSettings)
    firebase: FirebaseSettings = Field(default_factory=FirebaseSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Self:
        """Validate that production settings are properly configured.

        Raises:
            ValueError: If running in production against a non-HTTPS backend.
        """
        if self.environment == "production":
            if not self.api.base_url.startswith("https://"):
                raise ValueError(
                    "API base URL must use HTTPS in production. "
                    "Set API_BASE_URL environment variable."
                )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call clear_settings_cache() if you need to reload settings.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Call this if you need to reload settings from environment.
    Useful for testing or dynamic configuration updates.
    """
    get_settings.cache_clear()
