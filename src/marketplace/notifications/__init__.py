"""Notification channel registry.

Provides singleton access to the channel that order notifications go
through. ``NOTIFICATION_CHANNEL`` selects it: ``log`` (default) writes to
the structured log, ``fake`` records messages in memory.
"""

import os

_channel = None


def get_channel():
    """Return the configured channel adapter (singleton)."""
    global _channel
    if _channel is None:
        kind = os.getenv("NOTIFICATION_CHANNEL", "log").lower()
        if kind == "fake":
            from marketplace.notifications.fake import FakeNotificationChannel

            _channel = FakeNotificationChannel()
        elif kind == "log":
            from marketplace.notifications.log_channel import LoggingNotificationChannel

            _channel = LoggingNotificationChannel()
        else:
            raise ValueError(f"Unknown notification channel: {kind}")
    return _channel


def set_channel(channel):
    """Install a specific channel adapter."""
    global _channel
    _channel = channel


def reset_channel():
    """Drop the current channel so the next call rebuilds it (useful for testing)."""
    global _channel
    _channel = None
