from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schema.sql")


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


def _now() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


class Database:
    """Opens connections to one SQLite file. One connection per unit of work."""

    def __init__(self, path: str, timeout: float = 5.0) -> None:
        self.path = path
        self.timeout = timeout

    def connect(self) -> sqlite3.Connection:
        d = os.path.dirname(self.path)
        if d:
            os.makedirs(d, exist_ok=True)
        # autocommit mode: transactions are opened explicitly in transaction()
        conn = sqlite3.connect(self.path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def init_db(self) -> None:
        conn = self.connect()
        try:
            conn.execute("PRAGMA journal_mode = WAL")
            with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
                conn.executescript(f.read())
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                logger.warning("transaction rolled back")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    @contextmanager
    def atomic(self, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
        """Joins the caller's transaction when ``conn`` is given, else opens one."""
        if conn is not None:
            yield conn
            return
        with self.transaction() as own:
            yield own

    @contextmanager
    def session(self, conn: Optional[sqlite3.Connection] = None) -> Iterator[sqlite3.Connection]:
        """Reuses ``conn`` when given (caller owns it), else opens a fresh one."""
        if conn is not None:
            yield conn
            return
        own = self.connect()
        try:
            yield own
        finally:
            own.close()


def _row(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    return dict(row) if row else None


# ---------------- regions ----------------

def list_regions(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(
        "SELECT id, name, currency_code, tax_rate FROM regions WHERE deleted_at IS NULL ORDER BY rowid"
    ).fetchall()
    countries: Dict[str, List[str]] = {}
    for c in conn.execute("SELECT iso_2, region_id FROM countries WHERE region_id IS NOT NULL ORDER BY iso_2"):
        countries.setdefault(c["region_id"], []).append(c["iso_2"])

    out = []
    for r in rows:
        d = dict(r)
        d["countries"] = countries.get(r["id"], [])
        out.append(d)
    return out


def get_region(conn: sqlite3.Connection, region_id: str) -> Optional[Dict[str, Any]]:
    """Region by id, soft-deleted ones included."""
    row = conn.execute(
        "SELECT id, name, currency_code, tax_rate FROM regions WHERE id = ?",
        (region_id,),
    ).fetchone()
    if not row:
        return None
    d = dict(row)
    d["countries"] = [
        c["iso_2"]
        for c in conn.execute("SELECT iso_2 FROM countries WHERE region_id = ? ORDER BY iso_2", (region_id,))
    ]
    return d


def add_region(
    conn: sqlite3.Connection,
    name: str,
    currency_code: str,
    tax_rate: float = 0.0,
    countries: Iterable[str] = (),
    region_id: Optional[str] = None,
) -> str:
    rid = region_id or new_id("reg")
    conn.execute(
        "INSERT INTO regions(id, name, currency_code, tax_rate, created_at) VALUES(?,?,?,?,?)",
        (rid, name, currency_code.lower(), float(tax_rate), _now()),
    )
    for iso in countries:
        conn.execute(
            "INSERT INTO countries(iso_2, name, region_id) VALUES(?,?,?) "
            "ON CONFLICT(iso_2) DO UPDATE SET region_id=excluded.region_id",
            (iso.lower(), iso.upper(), rid),
        )
    return rid


# ---------------- customers ----------------

def get_customer(conn: sqlite3.Connection, customer_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id, email, first_name, last_name FROM customers WHERE id = ?",
        (customer_id,),
    ).fetchone()
    if not row:
        return None
    d = dict(row)
    d["groups"] = tuple(
        r["customer_group_id"]
        for r in conn.execute(
            "SELECT customer_group_id FROM customer_group_customers WHERE customer_id = ? ORDER BY customer_group_id",
            (customer_id,),
        )
    )
    return d


def add_customer(
    conn: sqlite3.Connection,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    groups: Iterable[str] = (),
    customer_id: Optional[str] = None,
) -> str:
    cid = customer_id or new_id("cus")
    conn.execute(
        "INSERT INTO customers(id, email, first_name, last_name, created_at) VALUES(?,?,?,?,?)",
        (cid, email, first_name, last_name, _now()),
    )
    for g in groups:
        conn.execute(
            "INSERT INTO customer_group_customers(customer_group_id, customer_id) VALUES(?,?)",
            (g, cid),
        )
    return cid


# ---------------- sales channels ----------------

def get_sales_channel(conn: sqlite3.Connection, sales_channel_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id, name, is_disabled FROM sales_channels WHERE id = ?",
        (sales_channel_id,),
    ).fetchone()
    if not row:
        return None
    d = dict(row)
    d["is_disabled"] = bool(d["is_disabled"])
    return d


def add_sales_channel(
    conn: sqlite3.Connection,
    name: str,
    is_disabled: bool = False,
    sales_channel_id: Optional[str] = None,
) -> str:
    sid = sales_channel_id or new_id("sc")
    conn.execute(
        "INSERT INTO sales_channels(id, name, is_disabled, created_at) VALUES(?,?,?,?)",
        (sid, name, int(is_disabled), _now()),
    )
    return sid


def variants_outside_sales_channel(
    conn: sqlite3.Connection, variant_ids: Iterable[str], sales_channel_id: str
) -> List[str]:
    """Variant ids whose product is not assigned to the sales channel."""
    out = []
    for vid in variant_ids:
        row = conn.execute(
            """
            SELECT 1
            FROM product_variants v
            JOIN product_sales_channels ps ON ps.product_id = v.product_id
            WHERE v.id = ? AND ps.sales_channel_id = ?
            """,
            (vid, sales_channel_id),
        ).fetchone()
        if not row:
            out.append(vid)
    return out


# ---------------- products / variants / prices ----------------

def add_product(
    conn: sqlite3.Connection,
    title: str,
    thumbnail: Optional[str] = None,
    discountable: bool = True,
    sales_channels: Iterable[str] = (),
    product_id: Optional[str] = None,
) -> str:
    pid = product_id or new_id("prod")
    conn.execute(
        "INSERT INTO products(id, title, thumbnail, discountable, created_at) VALUES(?,?,?,?,?)",
        (pid, title, thumbnail, int(discountable), _now()),
    )
    for sc in sales_channels:
        conn.execute(
            "INSERT INTO product_sales_channels(product_id, sales_channel_id) VALUES(?,?)",
            (pid, sc),
        )
    return pid


def add_variant(
    conn: sqlite3.Connection,
    product_id: str,
    title: str,
    sku: Optional[str] = None,
    variant_id: Optional[str] = None,
) -> str:
    vid = variant_id or new_id("variant")
    conn.execute(
        "INSERT INTO product_variants(id, product_id, title, sku, created_at) VALUES(?,?,?,?,?)",
        (vid, product_id, title, sku, _now()),
    )
    return vid


def add_money_amount(
    conn: sqlite3.Connection,
    variant_id: str,
    currency_code: str,
    amount: int,
    region_id: Optional[str] = None,
    customer_group_id: Optional[str] = None,
    min_quantity: Optional[int] = None,
    max_quantity: Optional[int] = None,
) -> int:
    cur = conn.execute(
        """
        INSERT INTO money_amounts(variant_id, currency_code, amount, region_id, customer_group_id, min_quantity, max_quantity)
        VALUES(?,?,?,?,?,?,?)
        """,
        (variant_id, currency_code.lower(), int(amount), region_id, customer_group_id, min_quantity, max_quantity),
    )
    return int(cur.lastrowid)


def get_variant(conn: sqlite3.Connection, variant_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT v.id, v.title, v.sku, v.product_id,
               p.title AS product_title, p.thumbnail, p.discountable
        FROM product_variants v
        JOIN products p ON p.id = v.product_id
        WHERE v.id = ? AND v.deleted_at IS NULL
        """,
        (variant_id,),
    ).fetchone()
    if not row:
        return None
    d = dict(row)
    d["discountable"] = bool(d["discountable"])
    return d


def list_variant_prices(conn: sqlite3.Connection, variant_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, currency_code, amount, region_id, customer_group_id, min_quantity, max_quantity
        FROM money_amounts
        WHERE variant_id = ?
        ORDER BY id
        """,
        (variant_id,),
    ).fetchall()
    return [dict(r) for r in rows]


# ---------------- carts ----------------

def add_address(conn: sqlite3.Connection, data: Dict[str, Any]) -> str:
    aid = new_id("addr")
    conn.execute(
        """
        INSERT INTO addresses(id, country_code, first_name, last_name, address_1, city, postal_code, created_at)
        VALUES(?,?,?,?,?,?,?,?)
        """,
        (
            aid,
            data.get("country_code"),
            data.get("first_name"),
            data.get("last_name"),
            data.get("address_1"),
            data.get("city"),
            data.get("postal_code"),
            _now(),
        ),
    )
    return aid


def get_address(conn: sqlite3.Connection, address_id: str) -> Optional[Dict[str, Any]]:
    return _row(
        conn.execute(
            "SELECT id, country_code, first_name, last_name, address_1, city, postal_code FROM addresses WHERE id = ?",
            (address_id,),
        ).fetchone()
    )


def insert_cart(conn: sqlite3.Connection, data: Dict[str, Any]) -> str:
    cid = new_id("cart")
    ts = _now()
    conn.execute(
        """
        INSERT INTO carts(id, email, region_id, customer_id, sales_channel_id, shipping_address_id, context, created_at, updated_at)
        VALUES(?,?,?,?,?,?,?,?,?)
        """,
        (
            cid,
            data.get("email"),
            data["region_id"],
            data.get("customer_id"),
            data.get("sales_channel_id"),
            data.get("shipping_address_id"),
            json.dumps(data.get("context") or {}),
            ts,
            ts,
        ),
    )
    return cid


def get_cart(conn: sqlite3.Connection, cart_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        """
        SELECT id, email, region_id, customer_id, sales_channel_id, shipping_address_id, context, created_at, updated_at
        FROM carts WHERE id = ?
        """,
        (cart_id,),
    ).fetchone()
    if not row:
        return None
    d = dict(row)
    d["context"] = json.loads(d["context"] or "{}")
    return d


def touch_cart(conn: sqlite3.Connection, cart_id: str) -> None:
    conn.execute("UPDATE carts SET updated_at=? WHERE id=?", (_now(), cart_id))


def list_line_items(conn: sqlite3.Connection, cart_id: str) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, cart_id, variant_id, title, description, thumbnail, unit_price, quantity, should_merge, allow_discounts
        FROM line_items
        WHERE cart_id = ?
        ORDER BY rowid
        """,
        (cart_id,),
    ).fetchall()
    out = []
    for r in rows:
        d = dict(r)
        d["should_merge"] = bool(d["should_merge"])
        d["allow_discounts"] = bool(d["allow_discounts"])
        out.append(d)
    return out


def insert_line_item(conn: sqlite3.Connection, cart_id: str, item: Dict[str, Any]) -> None:
    conn.execute(
        """
        INSERT INTO line_items(id, cart_id, variant_id, title, description, thumbnail, unit_price, quantity,
                               should_merge, allow_discounts, created_at)
        VALUES(?,?,?,?,?,?,?,?,?,?,?)
        """,
        (
            item["id"],
            cart_id,
            item["variant_id"],
            item["title"],
            item.get("description"),
            item.get("thumbnail"),
            int(item["unit_price"]),
            int(item["quantity"]),
            int(item.get("should_merge", True)),
            int(item.get("allow_discounts", True)),
            _now(),
        ),
    )


def set_line_item_quantity(conn: sqlite3.Connection, line_item_id: str, quantity: int) -> None:
    conn.execute("UPDATE line_items SET quantity=? WHERE id=?", (int(quantity), line_item_id))


# ---------------- gift cards ----------------

def add_gift_card(
    conn: sqlite3.Connection,
    code: str,
    value: int,
    region_id: str,
    gift_card_id: Optional[str] = None,
) -> str:
    gid = gift_card_id or new_id("gift")
    conn.execute(
        "INSERT INTO gift_cards(id, code, value, balance, region_id, created_at) VALUES(?,?,?,?,?,?)",
        (gid, code, int(value), int(value), region_id, _now()),
    )
    return gid


def get_gift_card(conn: sqlite3.Connection, gift_card_id: str) -> Optional[Dict[str, Any]]:
    return _row(
        conn.execute(
            """
            SELECT id, code, value, balance, region_id, is_disabled, created_at
            FROM gift_cards WHERE id = ? AND deleted_at IS NULL
            """,
            (gift_card_id,),
        ).fetchone()
    )


def soft_delete_gift_card(conn: sqlite3.Connection, gift_card_id: str) -> None:
    conn.execute("UPDATE gift_cards SET deleted_at=? WHERE id=?", (_now(), gift_card_id))


# ---------------- batch jobs ----------------

def insert_batch_job(conn: sqlite3.Connection, data: Dict[str, Any]) -> str:
    bid = new_id("batch")
    conn.execute(
        """
        INSERT INTO batch_jobs(id, type, created_by, context, dry_run, status, result, created_at)
        VALUES(?,?,?,?,?,?,?,?)
        """,
        (
            bid,
            data["type"],
            data.get("created_by"),
            json.dumps(data.get("context") or {}),
            int(bool(data.get("dry_run"))),
            data["status"],
            json.dumps(data["result"]) if data.get("result") is not None else None,
            _now(),
        ),
    )
    return bid


def get_batch_job(conn: sqlite3.Connection, batch_job_id: str) -> Optional[Dict[str, Any]]:
    row = conn.execute(
        "SELECT id, type, created_by, context, dry_run, status, result, created_at FROM batch_jobs WHERE id = ?",
        (batch_job_id,),
    ).fetchone()
    if not row:
        return None
    d = dict(row)
    d["context"] = json.loads(d["context"] or "{}")
    d["dry_run"] = bool(d["dry_run"])
    d["result"] = json.loads(d["result"]) if d["result"] else None
    return d


# ---------------- shipping profiles ----------------

def _profile(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    if not row:
        return None
    d = dict(row)
    d["metadata"] = json.loads(d["metadata"]) if d["metadata"] else None
    return d


def insert_shipping_profile(
    conn: sqlite3.Connection, name: str, type_: str, metadata: Optional[Dict[str, Any]] = None
) -> str:
    sid = new_id("sp")
    ts = _now()
    conn.execute(
        "INSERT INTO shipping_profiles(id, name, type, metadata, created_at, updated_at) VALUES(?,?,?,?,?,?)",
        (sid, name, type_, json.dumps(metadata) if metadata is not None else None, ts, ts),
    )
    return sid


def get_shipping_profile(conn: sqlite3.Connection, profile_id: str) -> Optional[Dict[str, Any]]:
    return _profile(
        conn.execute(
            """
            SELECT id, name, type, metadata, created_at, updated_at
            FROM shipping_profiles WHERE id = ? AND deleted_at IS NULL
            """,
            (profile_id,),
        ).fetchone()
    )


def list_shipping_profiles(conn: sqlite3.Connection) -> List[Dict[str, Any]]:
    rows = conn.execute(
        """
        SELECT id, name, type, metadata, created_at, updated_at
        FROM shipping_profiles WHERE deleted_at IS NULL ORDER BY rowid
        """
    ).fetchall()
    return [_profile(r) for r in rows]


def update_shipping_profile(conn: sqlite3.Connection, profile_id: str, fields: Dict[str, Any]) -> None:
    sets = []
    params: List[Any] = []
    if "name" in fields:
        sets.append("name=?")
        params.append(fields["name"])
    if "metadata" in fields:
        sets.append("metadata=?")
        params.append(json.dumps(fields["metadata"]) if fields["metadata"] is not None else None)
    sets.append("updated_at=?")
    params.append(_now())
    params.append(profile_id)
    conn.execute(f"UPDATE shipping_profiles SET {', '.join(sets)} WHERE id=?", params)


def soft_delete_shipping_profile(conn: sqlite3.Connection, profile_id: str) -> None:
    conn.execute("UPDATE shipping_profiles SET deleted_at=? WHERE id=?", (_now(), profile_id))
