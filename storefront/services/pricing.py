from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, Optional

from storefront.models import Region


def _applies(price: Dict[str, Any], region: Region, groups: Iterable[str], quantity: int) -> bool:
    if price["region_id"] is not None:
        if price["region_id"] != region.id:
            return False
    elif price["currency_code"] != region.currency_code:
        return False

    group = price.get("customer_group_id")
    if group is not None and group not in groups:
        return False

    lo, hi = price.get("min_quantity"), price.get("max_quantity")
    if lo is not None and quantity < lo:
        return False
    if hi is not None and quantity > hi:
        return False
    return True


def select_price(
    prices: Iterable[Dict[str, Any]],
    region: Region,
    customer_groups: Iterable[str] = (),
    quantity: int = 1,
) -> Optional[int]:
    """Cheapest money amount applicable to the region, customer groups and quantity.

    Region-scoped amounts apply to their region only; currency-scoped amounts
    apply to any region using that currency. Returns None when nothing applies.
    """
    groups = set(customer_groups)
    candidates = [int(p["amount"]) for p in prices if _applies(p, region, groups, quantity)]
    return min(candidates) if candidates else None


def calc_tax(amount: int, tax_rate: float) -> int:
    """Tax on an amount in minor units, rate in percent, rounded half-up."""
    v = Decimal(amount) * Decimal(str(tax_rate)) / Decimal(100)
    return int(v.quantize(Decimal(1), rounding=ROUND_HALF_UP))
