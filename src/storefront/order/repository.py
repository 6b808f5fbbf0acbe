from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.paging import paginate


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number):
        results = self._dao.query.filter(order_number=order_number.strip().upper()).all().items
        return results[0] if results else None

    def count_placed_on(self, day) -> int:
        return self._dao.query.filter(placed_on=day.isoformat()).all().total

    def history_for(self, user_id, page: int, limit: int):
        """Return ``(orders, total)`` for a member, newest first."""
        queryset = self._dao.query.filter(user_id=str(user_id)).order_by("-created_at")
        return paginate(queryset, page, limit)

    def next_order_number(self, now) -> str:
        """``SN`` + yymmdd + a four-digit sequence for the day."""
        sequence = self.count_placed_on(now.date()) + 1
        return f"SN{now:%y%m%d}{sequence:04d}"
