from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from storefront.constants import SHIPPING_PROFILE_TYPES
from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ShippingProfileService:
    def __init__(self, db: Database) -> None:
        self.db = db

    def create(self, name: str, type_: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if type_ not in SHIPPING_PROFILE_TYPES:
            raise ValidationError(f"Unknown shipping profile type {type_}")
        with self.db.transaction() as conn:
            profile_id = store.insert_shipping_profile(conn, name, type_, metadata)
            profile = store.get_shipping_profile(conn, profile_id)
        logger.info("shipping profile %s created", profile_id)
        return profile

    def list(self) -> List[Dict[str, Any]]:
        with self.db.session() as conn:
            return store.list_shipping_profiles(conn)

    def retrieve(self, profile_id: str) -> Dict[str, Any]:
        with self.db.session() as conn:
            profile = store.get_shipping_profile(conn, profile_id)
        if not profile:
            raise NotFoundError(f"Profile with id: {profile_id} was not found")
        return profile

    def update(self, profile_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        if "name" in fields and not fields["name"]:
            raise ValidationError("Shipping profile name cannot be empty")
        with self.db.transaction() as conn:
            if not store.get_shipping_profile(conn, profile_id):
                raise NotFoundError(f"Profile with id: {profile_id} was not found")
            store.update_shipping_profile(conn, profile_id, fields)
            return store.get_shipping_profile(conn, profile_id)

    def delete(self, profile_id: str) -> None:
        with self.db.transaction() as conn:
            if not store.get_shipping_profile(conn, profile_id):
                raise NotFoundError(f"Profile with id: {profile_id} was not found")
            store.soft_delete_shipping_profile(conn, profile_id)
        logger.info("shipping profile %s deleted", profile_id)
