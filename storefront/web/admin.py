from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.models import AuthUser
from storefront.schemas import (
    AdminPostBatchesReq,
    AdminPostShippingProfilesProfileReq,
    AdminPostShippingProfilesReq,
)
from storefront.services.batch_job import BatchJobService
from storefront.services.gift_card import GiftCardService
from storefront.services.shipping_profile import ShippingProfileService
from storefront.web.auth import require_admin
from storefront.web.deps import (
    get_batch_job_service,
    get_gift_card_service,
    get_shipping_profile_service,
)

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# ---------------- gift cards ----------------

@router.delete("/gift-cards/{gift_card_id}")
def delete_gift_card(gift_card_id: str, gift_cards: GiftCardService = Depends(get_gift_card_service)):
    gift_cards.delete(gift_card_id)
    return {"id": gift_card_id, "object": "gift-card", "deleted": True}


# ---------------- batch jobs ----------------

@router.post("/batch-jobs", status_code=201)
def create_batch_job(
    payload: AdminPostBatchesReq,
    user: AuthUser = Depends(require_admin),
    batch_jobs: BatchJobService = Depends(get_batch_job_service),
):
    batch_job = batch_jobs.create(payload.model_dump(), user)
    return {"batch_job": batch_job}


@router.get("/batch-jobs/{batch_job_id}")
def get_batch_job(batch_job_id: str, batch_jobs: BatchJobService = Depends(get_batch_job_service)):
    return {"batch_job": batch_jobs.retrieve(batch_job_id)}


# ---------------- shipping profiles ----------------

@router.post("/shipping-profiles")
def create_shipping_profile(
    payload: AdminPostShippingProfilesReq,
    profiles: ShippingProfileService = Depends(get_shipping_profile_service),
):
    return {"shipping_profile": profiles.create(payload.name, payload.type)}


@router.get("/shipping-profiles")
def list_shipping_profiles(profiles: ShippingProfileService = Depends(get_shipping_profile_service)):
    return {"shipping_profiles": profiles.list()}


@router.get("/shipping-profiles/{profile_id}")
def get_shipping_profile(profile_id: str, profiles: ShippingProfileService = Depends(get_shipping_profile_service)):
    return {"shipping_profile": profiles.retrieve(profile_id)}


@router.post("/shipping-profiles/{profile_id}")
def update_shipping_profile(
    profile_id: str,
    payload: AdminPostShippingProfilesProfileReq,
    profiles: ShippingProfileService = Depends(get_shipping_profile_service),
):
    profile = profiles.update(profile_id, payload.model_dump(exclude_unset=True))
    return {"shipping_profile": profile}


@router.delete("/shipping-profiles/{profile_id}")
def delete_shipping_profile(profile_id: str, profiles: ShippingProfileService = Depends(get_shipping_profile_service)):
    profiles.delete(profile_id)
    return {"id": profile_id, "object": "shipping_profile", "deleted": True}
