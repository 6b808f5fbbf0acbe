"""Order status history: one persisted entry per status transition."""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import OrderPlaced, OrderStatusChanged
from storefront.order.order import Order
from storefront.shared.paging import fetch_all


@storefront.projection
class OrderStatusHistory:
    entry_id = Identifier(identifier=True, required=True)
    order_id = Identifier(required=True)
    status = String(required=True)
    previous_status = String()
    note = Text()
    changed_by = String()
    occurred_at = DateTime(required=True)


def _add_entry(order_id, status, occurred_at, previous_status=None, note=None, changed_by=None):
    current_domain.repository_for(OrderStatusHistory).add(
        OrderStatusHistory(
            entry_id=str(uuid.uuid4()),
            order_id=order_id,
            status=status,
            previous_status=previous_status,
            note=note,
            changed_by=changed_by,
            occurred_at=occurred_at,
        )
    )


def history_for(order_id) -> list[dict]:
    """Entries for an order, oldest first."""
    repo = current_domain.repository_for(OrderStatusHistory)
    entries = fetch_all(repo._dao.query.filter(order_id=str(order_id)))
    return [
        {
            "status": entry.status,
            "previous_status": entry.previous_status,
            "note": entry.note,
            "changed_by": entry.changed_by,
            "timestamp": entry.occurred_at,
        }
        for entry in sorted(entries, key=lambda e: e.occurred_at)
    ]


@storefront.projector(projector_for=OrderStatusHistory, aggregates=[Order])
class OrderStatusHistoryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        _add_entry(event.order_id, event.status, event.placed_at, note="Order created")

    @on(OrderStatusChanged)
    def on_order_status_changed(self, event):
        _add_entry(
            event.order_id,
            event.new_status,
            event.changed_at,
            previous_status=event.previous_status,
            note=event.note,
            changed_by=event.changed_by,
        )
