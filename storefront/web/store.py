from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from storefront.constants import DEFAULT_STORE_CART_FIELDS, DEFAULT_STORE_CART_RELATIONS
from storefront.models import AuthUser
from storefront.schemas import StorePostCartReq
from storefront.services.cart import CartService
from storefront.services.cart_assembler import CartAssembler
from storefront.web.auth import client_ip, get_current_customer
from storefront.web.deps import get_cart_assembler, get_cart_service

router = APIRouter(prefix="/store", tags=["store"])


# ---------------- carts ----------------

@router.post("/carts")
def create_cart(
    payload: StorePostCartReq,
    request: Request,
    user: Optional[AuthUser] = Depends(get_current_customer),
    assembler: CartAssembler = Depends(get_cart_assembler),
    carts: CartService = Depends(get_cart_service),
):
    req_context = {
        "ip": client_ip(request),
        "user_agent": request.headers.get("user-agent"),
    }
    cart = assembler.create(payload, user=user, request_context=req_context)

    data = carts.retrieve_with_totals(
        cart.id,
        select=DEFAULT_STORE_CART_FIELDS,
        relations=DEFAULT_STORE_CART_RELATIONS,
    )
    return {"cart": data}


@router.get("/carts/{cart_id}")
def get_cart(cart_id: str, carts: CartService = Depends(get_cart_service)):
    data = carts.retrieve_with_totals(
        cart_id,
        select=DEFAULT_STORE_CART_FIELDS,
        relations=DEFAULT_STORE_CART_RELATIONS,
    )
    return {"cart": data}
