"""Notification channel that writes each message to the structured log."""

from uuid import uuid4

import structlog

from marketplace.notifications.port import NotificationChannel

logger = structlog.get_logger(__name__)


class LoggingNotificationChannel(NotificationChannel):
    def send(self, to: str, subject: str, body: str) -> dict:
        message_id = f"log-{uuid4().hex[:12]}"
        logger.info("Notification dispatched", message_id=message_id, to=to, subject=subject)
        return {"message_id": message_id, "status": "sent"}
