import pytest

from storefront.db import sqlite as store
from storefront.errors import ConfigurationError, NotFoundError
from storefront.services.region import RegionService


def test_resolve_without_id_returns_first_listed_region(seed):
    regions = RegionService(seed)

    region = regions.resolve()

    assert region.id == regions.list()[0].id == "r1"
    assert region.currency_code == "usd"
    assert region.countries == ["ca", "us"]


def test_resolve_explicit_id(seed):
    region = RegionService(seed).resolve("r2")

    assert region.id == "r2"
    assert region.tax_rate == 20.0
    assert region.countries == ["de", "fr"]


def test_resolve_twice_returns_same_identifying_fields(seed):
    regions = RegionService(seed)

    a = regions.resolve("r2")
    b = regions.resolve("r2")

    assert (a.id, a.name, a.currency_code, a.countries) == (b.id, b.name, b.currency_code, b.countries)


def test_resolve_unknown_id_is_not_found(seed):
    with pytest.raises(NotFoundError):
        RegionService(seed).resolve("r_missing")


def test_resolve_without_regions_is_configuration_error(db):
    with pytest.raises(ConfigurationError, match="A region is required"):
        RegionService(db).resolve()


def test_first_region_follows_insertion_order(db):
    with db.transaction() as conn:
        store.add_region(conn, "Zeta", "usd", region_id="zz")
        store.add_region(conn, "Alpha", "usd", region_id="aa")

    assert RegionService(db).resolve().id == "zz"


def test_retrieve_uses_open_connection(seed):
    with seed.transaction() as conn:
        store.add_region(conn, "Asia", "jpy", region_id="r3")
        # visible inside the transaction that created it
        assert RegionService(seed).with_transaction(conn).retrieve("r3").name == "Asia"
