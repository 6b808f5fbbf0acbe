"""The process-wide email adapter.

Starts as the in-memory fake. A real provider is installed at startup with
``set_notifier``; tests go back to a fresh fake with ``reset_notifier``.
"""

from storefront.notification.email_port import EmailPort
from storefront.notification.fake_email import FakeEmailAdapter

_notifier: EmailPort | None = None


def get_notifier() -> EmailPort:
    global _notifier
    if _notifier is None:
        _notifier = FakeEmailAdapter()
    return _notifier


def set_notifier(notifier: EmailPort) -> None:
    global _notifier
    _notifier = notifier


def reset_notifier() -> None:
    global _notifier
    _notifier = None
