"""Notification channel port — abstract interface for message dispatch."""

from abc import ABC, abstractmethod


class NotificationChannel(ABC):
    """Abstract interface for notification channel adapters."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str) -> dict:
        """Send a message to a recipient.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
