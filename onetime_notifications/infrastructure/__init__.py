# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external service integrations.

This package contains clients and adapters for:
- Host platform notification capabilities
- Firebase Cloud Messaging
- The Onetime notifications REST API
"""
