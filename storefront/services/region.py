from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.errors import ConfigurationError, NotFoundError
from storefront.models import Region

logger = logging.getLogger(__name__)


def region_from_row(r: dict) -> Region:
    return Region(
        id=r["id"],
        name=r["name"],
        currency_code=r["currency_code"],
        tax_rate=float(r["tax_rate"]),
        countries=list(r["countries"]),
    )


class RegionService:
    def __init__(self, db: Database, conn: Optional[sqlite3.Connection] = None) -> None:
        self.db = db
        self.conn = conn

    def with_transaction(self, conn: sqlite3.Connection) -> "RegionService":
        return RegionService(self.db, conn)

    def list(self) -> List[Region]:
        with self.db.session(self.conn) as conn:
            rows = store.list_regions(conn)
        return [region_from_row(r) for r in rows]

    def retrieve(self, region_id: str) -> Region:
        for r in self.list():
            if r.id == region_id:
                return r
        raise NotFoundError(f"Region with id {region_id} was not found")

    def resolve(self, region_id: Optional[str] = None) -> Region:
        """Region for a new cart: the requested one, else the first listed."""
        regions = self.list()
        if region_id is not None:
            for r in regions:
                if r.id == region_id:
                    return r
            raise NotFoundError(f"Region with id {region_id} was not found")

        if not regions:
            raise ConfigurationError("A region is required to create a cart")
        logger.debug("no region requested, defaulting to %s", regions[0].id)
        return regions[0]
