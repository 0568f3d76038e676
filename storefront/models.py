from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Region:
    id: str
    name: str
    currency_code: str
    tax_rate: float = 0.0
    countries: List[str] = field(default_factory=list)  # iso_2, lower-case


@dataclass
class LineItem:
    id: str
    variant_id: str
    title: str
    unit_price: int  # minor units, fixed when generated
    quantity: int
    cart_id: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    should_merge: bool = True
    allow_discounts: bool = True


@dataclass
class Cart:
    id: str
    region_id: str
    email: Optional[str] = None
    customer_id: Optional[str] = None
    sales_channel_id: Optional[str] = None
    shipping_address_id: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    items: List[LineItem] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class Customer:
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    groups: tuple = ()


@dataclass(frozen=True)
class AuthUser:
    """Identity injected by the auth layer."""

    id: str
    customer_id: Optional[str] = None
