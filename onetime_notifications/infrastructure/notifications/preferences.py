# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Notification settings screen logic.

TopicPreferences is the non-rendering half of the notification settings
screen: it keeps the local topic subscription cache, drives the
lifecycle's actions and exposes a status banner that clears itself after
a few seconds.

The topic cache mirrors server state and is only flipped after the
server confirms a subscribe or unsubscribe.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Literal

from onetime_notifications.infrastructure.notifications.exceptions import NotificationError
from onetime_notifications.infrastructure.notifications.lifecycle import NotificationLifecycle
from onetime_notifications.infrastructure.notifications.models import TopicSubscription

logger = logging.getLogger(__name__)

AVAILABLE_TOPICS: tuple[TopicSubscription, ...] = (
    TopicSubscription(
        topic="job_alerts",
        label="일자리 알림",
        description="새로운 일자리 정보를 받아보세요",
    ),
    TopicSubscription(
        topic="urgent_jobs",
        label="급구 알림",
        description="급하게 구인하는 일자리를 우선 받아보세요",
    ),
    TopicSubscription(
        topic="location_seoul",
        label="서울 지역 알림",
        description="서울 지역의 일자리만 받아보세요",
    ),
    TopicSubscription(
        topic="system_notices",
        label="시스템 공지",
        description="중요한 시스템 공지사항을 받아보세요",
    ),
)


@dataclass(frozen=True)
class StatusBanner:
    """Transient success or error message shown on the settings screen."""

    kind: Literal["success", "error"]
    text: str


class TopicPreferences:
    """Topic subscriptions and status banner for the settings screen.

    Attributes:
        topics: Local topic cache, in display order.
        banner: Current status banner, or None.
    """

    def __init__(
        self,
        lifecycle: NotificationLifecycle,
        topics: tuple[TopicSubscription, ...] = AVAILABLE_TOPICS,
        banner_timeout: float = 5.0,
    ) -> None:
        self._lifecycle = lifecycle
        self.topics = [replace(topic) for topic in topics]
        self.banner: StatusBanner | None = None
        self._banner_timeout = banner_timeout
        self._banner_timer: asyncio.TimerHandle | None = None

    def _show_banner(self, kind: Literal["success", "error"], text: str) -> None:
        if self._banner_timer is not None:
            self._banner_timer.cancel()
        self.banner = StatusBanner(kind=kind, text=text)
        self._banner_timer = asyncio.get_running_loop().call_later(
            self._banner_timeout,
            self.clear_banner,
        )

    def clear_banner(self) -> None:
        """Remove the current banner and cancel its timer."""
        if self._banner_timer is not None:
            self._banner_timer.cancel()
            self._banner_timer = None
        self.banner = None

    def get_topic(self, topic: str) -> TopicSubscription:
        """Look up a cached topic by name.

        Raises:
            KeyError: If the topic is not offered on this screen.
        """
        for subscription in self.topics:
            if subscription.topic == topic:
                return subscription
        raise KeyError(topic)

    async def enable_notifications(self) -> bool:
        """Request permission and report the outcome in the banner."""
        try:
            granted = await self._lifecycle.request_permission()
        except NotificationError as e:
            self._show_banner("error", e.message)
            return False

        if granted:
            self._show_banner("success", "알림 권한이 허용되었습니다!")
        else:
            self._show_banner("error", "알림 권한이 거부되었습니다.")
        return granted

    async def send_test(self) -> bool:
        """Send a SYSTEM test notification and report it in the banner."""
        try:
            await self._lifecycle.send_test_notification(
                "SYSTEM",
                {
                    "message": "테스트 알림입니다.",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                },
            )
        except NotificationError as e:
            self._show_banner("error", e.message)
            return False

        self._show_banner("success", "테스트 알림을 전송했습니다!")
        return True

    async def toggle(self, topic: str) -> bool:
        """Flip the subscription for ``topic`` on the server, then locally.

        Returns:
            True if the server confirmed the change.
        """
        subscription = self.get_topic(topic)
        was_subscribed = subscription.subscribed

        try:
            if was_subscribed:
                confirmed = await self._lifecycle.unsubscribe_from_topic(topic)
            else:
                confirmed = await self._lifecycle.subscribe_to_topic(topic)
        except NotificationError as e:
            self._show_banner("error", e.message)
            return False

        if confirmed:
            subscription.subscribed = not was_subscribed
            self._show_banner(
                "success",
                "구독을 해제했습니다." if was_subscribed else "구독했습니다.",
            )
        return confirmed
