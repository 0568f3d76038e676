from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from typing import Optional

from storefront.db import sqlite as store
from storefront.db.sqlite import Database, new_id
from storefront.errors import NotFoundError
from storefront.models import LineItem, Region
from storefront.services.pricing import select_price
from storefront.services.region import RegionService
from storefront.utils.validators import require_positive_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerateContext:
    region: Optional[Region] = None
    customer_id: Optional[str] = None


class LineItemService:
    def __init__(self, db: Database, conn: Optional[sqlite3.Connection] = None) -> None:
        self.db = db
        self.conn = conn

    def with_transaction(self, conn: sqlite3.Connection) -> "LineItemService":
        return LineItemService(self.db, conn)

    def generate(
        self,
        variant_id: str,
        region_id: str,
        quantity: int,
        context: GenerateContext = GenerateContext(),
    ) -> LineItem:
        """Build an unsaved line item with its unit price fixed at this moment."""
        require_positive_int(quantity, "quantity")

        with self.db.session(self.conn) as conn:
            region = context.region
            if region is None or region.id != region_id:
                region = RegionService(self.db, conn).retrieve(region_id)

            variant = store.get_variant(conn, variant_id)
            if not variant:
                raise NotFoundError(f"Variant with id {variant_id} was not found")

            groups = ()
            if context.customer_id:
                customer = store.get_customer(conn, context.customer_id)
                if customer:
                    groups = customer["groups"]

            unit_price = select_price(store.list_variant_prices(conn, variant_id), region, groups, quantity)

        if unit_price is None:
            raise NotFoundError(f"Variant with id {variant_id} has no price in region {region.id}")

        item = LineItem(
            id=new_id("item"),
            variant_id=variant["id"],
            title=variant["product_title"],
            description=variant["title"],
            thumbnail=variant["thumbnail"],
            unit_price=unit_price,
            quantity=quantity,
            allow_discounts=variant["discountable"],
        )
        logger.debug("generated %s x%d @ %d for %s", variant_id, quantity, unit_price, region.id)
        return item
