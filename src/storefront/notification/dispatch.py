"""Compose a notice and hand it to the configured email adapter.

Delivery problems are logged and reported to the caller as ``False``; they
never propagate into the command that triggered the notice.
"""

import structlog

from storefront.notification import get_notifier
from storefront.notification.messages import Notice, compose

logger = structlog.get_logger(__name__)


def notify(notice: Notice, to: str | None, context: dict) -> bool:
    if not to:
        logger.info("Notice skipped, no recipient", notice=notice.value)
        return False

    message = compose(notice, to, context)
    try:
        receipt = get_notifier().deliver(message)
    except Exception:
        logger.exception("Email transport failed", notice=notice.value, to=to)
        return False

    if not receipt.delivered:
        logger.warning("Email not delivered", notice=notice.value, to=to, error=receipt.error)
        return False

    logger.info("Notice sent", notice=notice.value, to=to, message_id=receipt.message_id)
    return True
