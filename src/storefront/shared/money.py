"""Money helpers shared by cart, checkout and order pricing."""

from decimal import ROUND_HALF_UP, Decimal


def round_money(amount) -> float:
    """Round to cents, half away from zero, and return a float for storage."""
    return float(Decimal(str(amount or 0)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
