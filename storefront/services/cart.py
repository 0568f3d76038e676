from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, Iterable, Optional, Sequence

from storefront.constants import CART_RELATIONS, TOTAL_FIELDS
from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.errors import NotFoundError, ValidationError
from storefront.models import Cart, LineItem
from storefront.services.pricing import calc_tax

logger = logging.getLogger(__name__)

CART_COLUMNS = (
    "id",
    "email",
    "region_id",
    "customer_id",
    "sales_channel_id",
    "shipping_address_id",
    "context",
    "created_at",
    "updated_at",
)


def _line_item(d: Dict[str, Any]) -> LineItem:
    return LineItem(
        id=d["id"],
        cart_id=d["cart_id"],
        variant_id=d["variant_id"],
        title=d["title"],
        description=d["description"],
        thumbnail=d["thumbnail"],
        unit_price=int(d["unit_price"]),
        quantity=int(d["quantity"]),
        should_merge=d["should_merge"],
        allow_discounts=d["allow_discounts"],
    )


class CartService:
    def __init__(self, db: Database, conn: Optional[sqlite3.Connection] = None) -> None:
        self.db = db
        self.conn = conn

    def with_transaction(self, conn: sqlite3.Connection) -> "CartService":
        return CartService(self.db, conn)

    def create(self, data: Dict[str, Any]) -> Cart:
        """Persist a cart from prepared attributes.

        ``data`` holds ``region_id`` and optionally ``sales_channel_id``,
        ``customer_id``, ``email``, ``context`` and ``shipping_address``.
        """
        with self.db.atomic(self.conn) as conn:
            sc_id = data.get("sales_channel_id")
            if sc_id:
                sc = store.get_sales_channel(conn, sc_id)
                if not sc:
                    raise NotFoundError(f"Sales channel with id {sc_id} was not found")
                if sc["is_disabled"]:
                    raise ValidationError(f"Unable to assign the cart to a disabled Sales Channel {sc['name']}")

            row = dict(data)
            address = row.pop("shipping_address", None)
            if address:
                row["shipping_address_id"] = store.add_address(conn, address)

            cart_id = store.insert_cart(conn, row)
            cart = self._load(conn, cart_id)

        logger.info("cart %s created in region %s", cart.id, cart.region_id)
        return cart

    def retrieve(self, cart_id: str) -> Cart:
        with self.db.session(self.conn) as conn:
            return self._load(conn, cart_id)

    def add_line_items(
        self,
        cart_id: str,
        items: Sequence[LineItem],
        validate_sales_channels: bool = True,
    ) -> None:
        """Attach a batch of generated line items to a cart.

        An incoming item merges into an already-persisted item of the same
        variant when both allow merging. Items of one batch never merge with
        each other.
        """
        with self.db.atomic(self.conn) as conn:
            cart = store.get_cart(conn, cart_id)
            if not cart:
                raise NotFoundError(f"Cart with id {cart_id} was not found")

            if validate_sales_channels and cart["sales_channel_id"]:
                outside = store.variants_outside_sales_channel(
                    conn, [i.variant_id for i in items], cart["sales_channel_id"]
                )
                if outside:
                    raise ValidationError(
                        f"The variants [{', '.join(outside)}] must belong to the sales channel "
                        f"on which the cart has been created."
                    )

            existing = {}
            for d in store.list_line_items(conn, cart_id):
                if d["should_merge"]:
                    existing.setdefault(d["variant_id"], d)

            for item in items:
                match = existing.get(item.variant_id) if item.should_merge else None
                if match:
                    match["quantity"] += item.quantity
                    store.set_line_item_quantity(conn, match["id"], match["quantity"])
                    continue
                item.cart_id = cart_id
                store.insert_line_item(
                    conn,
                    cart_id,
                    {
                        "id": item.id,
                        "variant_id": item.variant_id,
                        "title": item.title,
                        "description": item.description,
                        "thumbnail": item.thumbnail,
                        "unit_price": item.unit_price,
                        "quantity": item.quantity,
                        "should_merge": item.should_merge,
                        "allow_discounts": item.allow_discounts,
                    },
                )
            store.touch_cart(conn, cart_id)

        logger.info("added %d line item(s) to cart %s", len(items), cart_id)

    def retrieve_with_totals(
        self,
        cart_id: str,
        select: Optional[Iterable[str]] = None,
        relations: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """Read a cart back with computed totals, shaped by ``select``/``relations``."""
        select = list(select) if select is not None else list(TOTAL_FIELDS)
        relations = list(relations) if relations is not None else []

        unknown = [f for f in select if f not in TOTAL_FIELDS and f not in CART_COLUMNS]
        unknown += [r for r in relations if r not in CART_RELATIONS]
        if unknown:
            raise ValidationError(f"Unknown cart fields or relations: {', '.join(unknown)}")

        totals = [f for f in select if f in TOTAL_FIELDS]
        columns = [f for f in select if f in CART_COLUMNS] or list(CART_COLUMNS)
        if "id" not in columns:
            columns.insert(0, "id")

        with self.db.session(self.conn) as conn:
            cart = store.get_cart(conn, cart_id)
            if not cart:
                raise NotFoundError(f"Cart with id {cart_id} was not found")
            region = store.get_region(conn, cart["region_id"])
            if not region:
                raise NotFoundError(f"Region with id {cart['region_id']} was not found")
            items = store.list_line_items(conn, cart_id)
            address = store.get_address(conn, cart["shipping_address_id"]) if cart["shipping_address_id"] else None
            channel = store.get_sales_channel(conn, cart["sales_channel_id"]) if cart["sales_channel_id"] else None

        rate = float(region["tax_rate"])
        subtotal = 0
        tax_total = 0
        for it in items:
            it["subtotal"] = it["unit_price"] * it["quantity"]
            it["tax_total"] = calc_tax(it["subtotal"], rate)
            it["total"] = it["subtotal"] + it["tax_total"]
            subtotal += it["subtotal"]
            tax_total += it["tax_total"]

        computed = {
            "subtotal": subtotal,
            "tax_total": tax_total,
            "shipping_total": 0,
            "discount_total": 0,
            "gift_card_total": 0,
        }
        computed["total"] = (
            subtotal
            + computed["shipping_total"]
            + tax_total
            - computed["discount_total"]
            - computed["gift_card_total"]
        )

        out = {c: cart[c] for c in columns}
        for f in totals:
            out[f] = computed[f]

        if "region" in relations or "region.countries" in relations:
            r = {k: region[k] for k in ("id", "name", "currency_code", "tax_rate")}
            if "region.countries" in relations:
                r["countries"] = [{"iso_2": c} for c in region["countries"]]
            out["region"] = r
        if "items" in relations:
            out["items"] = items
        if "shipping_address" in relations:
            out["shipping_address"] = address
        if "sales_channel" in relations:
            out["sales_channel"] = channel
        return out

    @staticmethod
    def _load(conn: sqlite3.Connection, cart_id: str) -> Cart:
        d = store.get_cart(conn, cart_id)
        if not d:
            raise NotFoundError(f"Cart with id {cart_id} was not found")
        return Cart(
            id=d["id"],
            region_id=d["region_id"],
            email=d["email"],
            customer_id=d["customer_id"],
            sales_channel_id=d["sales_channel_id"],
            shipping_address_id=d["shipping_address_id"],
            context=d["context"],
            items=[_line_item(i) for i in store.list_line_items(conn, cart_id)],
            created_at=d["created_at"],
            updated_at=d["updated_at"],
        )
