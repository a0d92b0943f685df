"""Fake notifier — records messages in memory for development and tests."""

from uuid import uuid4

from ordering.notifier.port import Notifier


class FakeNotifier(Notifier):
    """Notifier that keeps every accepted message in ``sent``."""

    def __init__(self):
        self.sent: list[dict] = []
        self.should_succeed = True

    def configure(self, should_succeed: bool = True):
        """Configure the fake notifier behavior for testing."""
        self.should_succeed = should_succeed

    def send(
        self,
        to: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> bool:
        if not self.should_succeed:
            return False

        self.sent.append(
            {
                "message_id": f"msg-{uuid4().hex[:12]}",
                "to": to,
                "subject": subject,
                "text": text,
                "html": html,
            }
        )
        return True

    def messages_to(self, address: str) -> list[dict]:
        return [message for message in self.sent if message["to"] == address]

    def reset(self):
        """Clear recorded messages (useful between tests)."""
        self.sent.clear()
        self.should_succeed = True
