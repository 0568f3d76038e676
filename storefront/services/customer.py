from __future__ import annotations

import sqlite3
from typing import Optional

from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.errors import NotFoundError
from storefront.models import Customer


class CustomerService:
    def __init__(self, db: Database, conn: Optional[sqlite3.Connection] = None) -> None:
        self.db = db
        self.conn = conn

    def retrieve(self, customer_id: str) -> Customer:
        with self.db.session(self.conn) as conn:
            row = store.get_customer(conn, customer_id)
        if not row:
            raise NotFoundError(f"Customer with id {customer_id} was not found")
        return Customer(
            id=row["id"],
            email=row["email"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            groups=row["groups"],
        )
