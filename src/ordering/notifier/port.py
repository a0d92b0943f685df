"""Notifier port — abstract interface for outbound email."""

from abc import ABC, abstractmethod


class Notifier(ABC):
    """Abstract interface for notification adapters.

    Implementations must never raise: delivery problems are reported through
    the boolean result so callers can decide whether the failure matters.
    """

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        text: str,
        html: str | None = None,
    ) -> bool:
        """Send one message. Returns True when the message was accepted for delivery."""
        ...
