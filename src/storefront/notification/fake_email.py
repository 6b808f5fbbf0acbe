"""In-memory email adapter: keeps an outbox instead of sending."""

from uuid import uuid4

import structlog

from storefront.notification.email_port import DeliveryReceipt, EmailMessage, EmailPort

logger = structlog.get_logger(__name__)


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.outbox: list[EmailMessage] = []
        self._failure: str | None = None

    def fail_deliveries(self, reason: str = "Mailbox unavailable"):
        """Reject every following message with ``reason``."""
        self._failure = reason

    def deliver(self, message: EmailMessage) -> DeliveryReceipt:
        if self._failure:
            return DeliveryReceipt(delivered=False, error=self._failure)

        message_id = f"email-{uuid4().hex[:12]}"
        self.outbox.append(message)
        logger.info("Email recorded", message_id=message_id, to=message.to, notice=message.notice)
        return DeliveryReceipt(delivered=True, message_id=message_id)

    def sent_to(self, address: str) -> list[EmailMessage]:
        return [message for message in self.outbox if message.to == address]
