"""
Shared fixtures for the storefront tests.

Every test gets its own SQLite file under pytest's tmp_path. The ``seed``
fixture fills it with a small catalog:

- regions: r1 (usd, us/ca, 10% tax) listed first, r2 (eur, de/fr, 20% tax)
- sales channels: sc_web, sc_pos, sc_old (disabled)
- v1 "Shirt / M": 1000 usd, 900 eur; product in sc_web
- v2 "Mug / White": 2500 usd, 2000 in r1 for customer group "vip"; product in sc_web and sc_pos
- v3 "Sticker": 500 in r1 only; product in no sales channel
- customers: c1 a@b.com, c2 vip@b.com (group "vip")
"""
import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.flags import FlagRouter
from storefront.web.main import create_app

ADMIN_ID = "usr_admin"


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "store.db"))
    database.init_db()
    return database


@pytest.fixture
def seed(db):
    with db.transaction() as conn:
        store.add_region(conn, "North America", "usd", 10, ["us", "ca"], region_id="r1")
        store.add_region(conn, "Europe", "eur", 20, ["de", "fr"], region_id="r2")

        store.add_sales_channel(conn, "Web", sales_channel_id="sc_web")
        store.add_sales_channel(conn, "POS", sales_channel_id="sc_pos")
        store.add_sales_channel(conn, "Old", is_disabled=True, sales_channel_id="sc_old")

        store.add_product(conn, "Shirt", thumbnail="shirt.png", sales_channels=["sc_web"], product_id="p1")
        store.add_variant(conn, "p1", "Shirt / M", sku="SHIRT-M", variant_id="v1")
        store.add_money_amount(conn, "v1", "usd", 1000)
        store.add_money_amount(conn, "v1", "eur", 900)

        store.add_product(conn, "Mug", sales_channels=["sc_web", "sc_pos"], product_id="p2")
        store.add_variant(conn, "p2", "Mug / White", variant_id="v2")
        store.add_money_amount(conn, "v2", "usd", 2500)
        store.add_money_amount(conn, "v2", "usd", 2000, region_id="r1", customer_group_id="vip")

        store.add_product(conn, "Sticker", discountable=False, product_id="p3")
        store.add_variant(conn, "p3", "Sticker", variant_id="v3")
        store.add_money_amount(conn, "v3", "usd", 500, region_id="r1")

        store.add_customer(conn, "a@b.com", first_name="Ada", customer_id="c1")
        store.add_customer(conn, "vip@b.com", groups=["vip"], customer_id="c2")
    return db


@pytest.fixture
def count_rows(db):
    def _count(table: str) -> int:
        conn = db.connect()
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()

    return _count


@pytest.fixture
def flags():
    return FlagRouter()


@pytest.fixture
def settings(db):
    return Settings(db_path=db.path, admin_id=ADMIN_ID, default_sales_channel_id="sc_web")


@pytest.fixture
def client(seed, settings, flags):
    app = create_app(settings=settings, db=seed, flags=flags)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def empty_client(db, settings, flags):
    """Client over a database with no regions at all."""
    app = create_app(settings=settings, db=db, flags=flags)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers():
    return {"X-User-Id": ADMIN_ID}
