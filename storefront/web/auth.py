from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from storefront.models import AuthUser

CUSTOMER_HEADER = "x-customer-id"
USER_HEADER = "x-user-id"


def get_current_customer(request: Request) -> Optional[AuthUser]:
    """Customer identity forwarded by the auth layer in front of the store API."""
    customer_id = (request.headers.get(CUSTOMER_HEADER) or "").strip()
    if not customer_id:
        return None
    return AuthUser(id=customer_id, customer_id=customer_id)


def require_admin(request: Request) -> AuthUser:
    user_id = (request.headers.get(USER_HEADER) or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    admin_id = request.app.state.settings.admin_id
    if not admin_id or user_id != admin_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return AuthUser(id=user_id)


def client_ip(request: Request) -> Optional[str]:
    # These headers are set by the caller. Only trust them behind a proxy
    # that overwrites them before the request gets here.
    for h in ("x-client-ip", "x-forwarded-for", "x-real-ip"):
        v = request.headers.get(h)
        if v:
            # x-forwarded-for: client, proxy1, proxy2
            return v.split(",")[0].strip()
    return request.client.host if request.client else None
