"""Notifier factory.

Provides get_notifier() / set_notifier() to swap implementations:
- FakeNotifier for development and testing (default)
- SmtpNotifier when NOTIFIER_BACKEND=smtp
"""

import os

from ordering.notifier.fake import FakeNotifier
from ordering.notifier.port import Notifier

_current_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the current notifier, building it from NOTIFIER_BACKEND on first use."""
    global _current_notifier
    if _current_notifier is None:
        backend = os.getenv("NOTIFIER_BACKEND", "fake").lower()
        if backend == "smtp":
            from ordering.notifier.smtp import SmtpNotifier

            _current_notifier = SmtpNotifier.from_env()
        elif backend == "fake":
            _current_notifier = FakeNotifier()
        else:
            raise ValueError(f"Unknown notifier backend: {backend}")
    return _current_notifier


def set_notifier(notifier: Notifier) -> None:
    """Override the active notifier (useful for tests)."""
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    """Reset to the default notifier."""
    global _current_notifier
    _current_notifier = None
