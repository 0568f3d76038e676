from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from storefront.constants import SALES_CHANNELS_FLAG
from storefront.db.sqlite import Database
from storefront.errors import StoreError, TransactionError, ValidationError
from storefront.flags import FlagRouter
from storefront.models import AuthUser, Cart, LineItem
from storefront.schemas import StorePostCartReq
from storefront.services.cart import CartService
from storefront.services.customer import CustomerService
from storefront.services.line_item import GenerateContext, LineItemService
from storefront.services.region import RegionService

logger = logging.getLogger(__name__)


class CartAssembler:
    """Creates a cart with its initial line items in one transaction.

    Either the cart and every requested line item are persisted, or nothing
    is.
    """

    def __init__(
        self,
        db: Database,
        regions: RegionService,
        line_items: LineItemService,
        carts: CartService,
        customers: CustomerService,
        flags: FlagRouter,
        default_sales_channel_id: Optional[str] = None,
    ) -> None:
        self.db = db
        self.regions = regions
        self.line_items = line_items
        self.carts = carts
        self.customers = customers
        self.flags = flags
        self.default_sales_channel_id = default_sales_channel_id

    def create(
        self,
        request: StorePostCartReq,
        user: Optional[AuthUser] = None,
        request_context: Optional[Dict[str, Any]] = None,
    ) -> Cart:
        sales_channels_on = self.flags.is_feature_enabled(SALES_CHANNELS_FLAG)
        if request.sales_channel_id and not sales_channels_on:
            raise ValidationError("property sales_channel_id should not exist")

        region = self.regions.resolve(request.region_id)

        to_create: Dict[str, Any] = {
            "region_id": region.id,
            "context": {**(request_context or {}), **(request.context or {})},
        }
        if sales_channels_on:
            sc_id = request.sales_channel_id or self.default_sales_channel_id
            if sc_id:
                to_create["sales_channel_id"] = sc_id

        customer_id = None
        if user and user.customer_id:
            customer = self.customers.retrieve(user.customer_id)
            customer_id = customer.id
            to_create["customer_id"] = customer.id
            to_create["email"] = customer.email

        if request.country_code:
            to_create["shipping_address"] = {"country_code": request.country_code.lower()}

        try:
            with self.db.transaction() as conn:
                carts = self.carts.with_transaction(conn)
                line_items = self.line_items.with_transaction(conn)

                cart = carts.create(to_create)

                if request.items:
                    ctx = GenerateContext(region=region, customer_id=customer_id)
                    generated: List[LineItem] = []
                    for item in request.items:
                        generated.append(line_items.generate(item.variant_id, region.id, item.quantity, ctx))

                    carts.add_line_items(cart.id, generated, validate_sales_channels=sales_channels_on)

                cart = carts.retrieve(cart.id)
        except StoreError:
            raise
        except Exception as e:
            logger.exception("cart creation failed in region %s", region.id)
            raise TransactionError("An error occurred while creating the cart") from e

        return cart
