"""Outbound email: the message, the provider's receipt, and the port."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str
    notice: str


@dataclass(frozen=True)
class DeliveryReceipt:
    delivered: bool
    message_id: str | None = None
    error: str | None = None


class EmailPort(ABC):
    @abstractmethod
    def deliver(self, message: EmailMessage) -> DeliveryReceipt:
        """Hand one message to the provider.

        A provider-side rejection comes back as an undelivered receipt;
        only transport failures raise.
        """
