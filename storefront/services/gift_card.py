from __future__ import annotations

import logging

from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.errors import NotFoundError

logger = logging.getLogger(__name__)


class GiftCardService:
    def __init__(self, db: Database) -> None:
        self.db = db

    def delete(self, gift_card_id: str) -> None:
        with self.db.transaction() as conn:
            if not store.get_gift_card(conn, gift_card_id):
                raise NotFoundError(f"Gift card with id {gift_card_id} was not found")
            store.soft_delete_gift_card(conn, gift_card_id)
        logger.info("gift card %s deleted", gift_card_id)
