from __future__ import annotations

from fastapi import Request

from storefront.db.sqlite import Database
from storefront.services.batch_job import BatchJobService, ProductExportStrategy
from storefront.services.cart import CartService
from storefront.services.cart_assembler import CartAssembler
from storefront.services.customer import CustomerService
from storefront.services.gift_card import GiftCardService
from storefront.services.line_item import LineItemService
from storefront.services.region import RegionService
from storefront.services.shipping_profile import ShippingProfileService


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_cart_service(request: Request) -> CartService:
    return CartService(get_db(request))


def get_cart_assembler(request: Request) -> CartAssembler:
    db = get_db(request)
    return CartAssembler(
        db=db,
        regions=RegionService(db),
        line_items=LineItemService(db),
        carts=CartService(db),
        customers=CustomerService(db),
        flags=request.app.state.flags,
        default_sales_channel_id=request.app.state.settings.default_sales_channel_id,
    )


def get_gift_card_service(request: Request) -> GiftCardService:
    return GiftCardService(get_db(request))


def get_batch_job_service(request: Request) -> BatchJobService:
    return BatchJobService(get_db(request), [ProductExportStrategy()])


def get_shipping_profile_service(request: Request) -> ShippingProfileService:
    return ShippingProfileService(get_db(request))
