"""Fake notification channel — records messages for test assertions."""

from uuid import uuid4

from marketplace.notifications.port import NotificationChannel


class FakeNotificationChannel(NotificationChannel):
    """Channel that records messages in memory and can be told to fail."""

    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.should_raise = False
        self.failure_reason = "Notification delivery failed"

    def configure(self, should_succeed=True, should_raise=False, failure_reason="Notification delivery failed"):
        """Configure the fake channel behavior for testing."""
        self.should_succeed = should_succeed
        self.should_raise = should_raise
        self.failure_reason = failure_reason

    def send(self, to: str, subject: str, body: str) -> dict:
        if self.should_raise:
            raise ConnectionError(self.failure_reason)

        if not self.should_succeed:
            return {"message_id": None, "status": "failed", "error": self.failure_reason}

        message_id = f"msg-{uuid4().hex[:12]}"
        self.sent_messages.append({"message_id": message_id, "to": to, "subject": subject, "body": body})
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear recorded messages and restore default behavior."""
        self.sent_messages.clear()
        self.configure()
