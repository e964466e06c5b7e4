"""Onetime notification client.

Client-side push notification lifecycle for the Onetime marketplace:
permission handling, FCM device tokens, foreground delivery and backend
registration of device tokens and topic subscriptions.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
