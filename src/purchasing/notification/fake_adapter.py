"""Fake notifier — records messages in memory instead of delivering them."""

from uuid import uuid4

from purchasing.notification.port import Notifier


class FakeNotifier(Notifier):
    """Notifier that keeps sent messages for test assertions."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True
        self.should_raise = False
        self.failure_reason = "Notification delivery failed"

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Notification delivery failed",
        should_raise: bool = False,
    ):
        """Configure the fake adapter behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.should_raise = should_raise

    def send(self, to: str, subject: str, body: str) -> dict:
        if self.should_raise:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"msg-{uuid4().hex[:12]}"
        self.sent.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def reset(self):
        """Clear sent messages and restore default behavior."""
        self.sent.clear()
        self.should_succeed = True
        self.should_raise = False
        self.failure_reason = "Notification delivery failed"
