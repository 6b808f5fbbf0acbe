"""Staff alerts for catalogue events."""

from protean.utils.mixins import handle

from storefront.catalogue.events import LowStockDetected
from storefront.catalogue.product import Product
from storefront.config import get_settings
from storefront.domain import storefront
from storefront.notification.dispatch import notify
from storefront.notification.messages import Notice


@storefront.event_handler(part_of=Product)
class LowStockAlertHandler:
    @handle(LowStockDetected)
    def on_low_stock(self, event: LowStockDetected) -> None:
        notify(
            Notice.LOW_STOCK,
            get_settings().staff_alert_email,
            {"sku": event.sku, "remaining": event.remaining, "threshold": event.threshold},
        )
