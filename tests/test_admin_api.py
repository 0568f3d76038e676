import pytest
from fastapi.testclient import TestClient

from storefront.db import sqlite as store
from storefront.errors import ValidationError
from storefront.services.shipping_profile import ShippingProfileService


class TestAdminAuth:
    def test_missing_user_is_unauthorized(self, client: TestClient):
        assert client.get("/admin/shipping-profiles").status_code == 401

    def test_other_user_is_forbidden(self, client: TestClient):
        response = client.get("/admin/shipping-profiles", headers={"X-User-Id": "usr_other"})
        assert response.status_code == 403


class TestGiftCards:
    @pytest.fixture
    def gift_card_id(self, seed):
        with seed.transaction() as conn:
            return store.add_gift_card(conn, "GIFT-100", 10000, "r1")

    def test_delete_gift_card(self, client: TestClient, admin_headers, gift_card_id, seed):
        response = client.delete(f"/admin/gift-cards/{gift_card_id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"id": gift_card_id, "object": "gift-card", "deleted": True}

        conn = seed.connect()
        try:
            assert store.get_gift_card(conn, gift_card_id) is None
            row = conn.execute("SELECT deleted_at FROM gift_cards WHERE id = ?", (gift_card_id,)).fetchone()
            assert row["deleted_at"] is not None
        finally:
            conn.close()

    def test_delete_twice_is_not_found(self, client: TestClient, admin_headers, gift_card_id):
        client.delete(f"/admin/gift-cards/{gift_card_id}", headers=admin_headers)
        response = client.delete(f"/admin/gift-cards/{gift_card_id}", headers=admin_headers)

        assert response.status_code == 404

    def test_delete_unknown_gift_card(self, client: TestClient, admin_headers):
        response = client.delete("/admin/gift-cards/gift_missing", headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["type"] == "not_found"


class TestBatchJobs:
    def test_create_product_export(self, client: TestClient, admin_headers, count_rows):
        response = client.post(
            "/admin/batch-jobs",
            json={"type": "product-export", "context": {"limit": 10}, "dry_run": True},
            headers=admin_headers,
        )

        assert response.status_code == 201
        batch_job = response.json()["batch_job"]
        assert batch_job["type"] == "product-export"
        assert batch_job["created_by"] == "usr_admin"
        assert batch_job["status"] == "created"
        assert batch_job["dry_run"] is True
        assert batch_job["context"]["list_config"] == {"skip": 0, "take": 10, "order": {"created_at": "DESC"}}
        assert count_rows("batch_jobs") == 1

    def test_get_batch_job(self, client: TestClient, admin_headers):
        created = client.post(
            "/admin/batch-jobs",
            json={"type": "product-export", "context": {}},
            headers=admin_headers,
        ).json()["batch_job"]

        response = client.get(f"/admin/batch-jobs/{created['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["batch_job"] == created
        assert created["dry_run"] is False

    def test_unknown_type(self, client: TestClient, admin_headers, count_rows):
        response = client.post(
            "/admin/batch-jobs",
            json={"type": "order-import", "context": {}},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert count_rows("batch_jobs") == 0

    def test_invalid_context(self, client: TestClient, admin_headers):
        response = client.post(
            "/admin/batch-jobs",
            json={"type": "product-export", "context": {"limit": 0}},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_context_is_required(self, client: TestClient, admin_headers):
        response = client.post("/admin/batch-jobs", json={"type": "product-export"}, headers=admin_headers)

        assert response.status_code == 400

    def test_dry_run_must_be_boolean(self, client: TestClient, admin_headers, count_rows):
        response = client.post(
            "/admin/batch-jobs",
            json={"type": "product-export", "context": {}, "dry_run": "yes"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert count_rows("batch_jobs") == 0

    def test_unknown_field_is_rejected(self, client: TestClient, admin_headers, count_rows):
        response = client.post(
            "/admin/batch-jobs",
            json={"type": "product-export", "context": {}, "created_by": "usr_other"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert count_rows("batch_jobs") == 0

    def test_unknown_batch_job(self, client: TestClient, admin_headers):
        assert client.get("/admin/batch-jobs/batch_missing", headers=admin_headers).status_code == 404


class TestShippingProfiles:
    def _create(self, client, headers, name="Bulky", type_="custom"):
        response = client.post("/admin/shipping-profiles", json={"name": name, "type": type_}, headers=headers)
        assert response.status_code == 200
        return response.json()["shipping_profile"]

    def test_create_and_list(self, client: TestClient, admin_headers):
        default = self._create(client, admin_headers, "Default", "default")
        bulky = self._create(client, admin_headers)

        response = client.get("/admin/shipping-profiles", headers=admin_headers)

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["shipping_profiles"]] == [default["id"], bulky["id"]]
        assert bulky["type"] == "custom"
        assert bulky["metadata"] is None

    def test_retrieve(self, client: TestClient, admin_headers):
        profile = self._create(client, admin_headers)

        response = client.get(f"/admin/shipping-profiles/{profile['id']}", headers=admin_headers)

        assert response.json()["shipping_profile"] == profile

    def test_update(self, client: TestClient, admin_headers):
        profile = self._create(client, admin_headers)

        response = client.post(
            f"/admin/shipping-profiles/{profile['id']}",
            json={"metadata": {"carrier": "dhl"}},
            headers=admin_headers,
        )

        assert response.status_code == 200
        updated = response.json()["shipping_profile"]
        assert updated["name"] == "Bulky"
        assert updated["metadata"] == {"carrier": "dhl"}

    def test_delete(self, client: TestClient, admin_headers):
        profile = self._create(client, admin_headers)

        response = client.delete(f"/admin/shipping-profiles/{profile['id']}", headers=admin_headers)

        assert response.json() == {"id": profile["id"], "object": "shipping_profile", "deleted": True}
        assert client.get(f"/admin/shipping-profiles/{profile['id']}", headers=admin_headers).status_code == 404
        assert client.get("/admin/shipping-profiles", headers=admin_headers).json()["shipping_profiles"] == []

    def test_invalid_type(self, client: TestClient, admin_headers):
        response = client.post(
            "/admin/shipping-profiles",
            json={"name": "x", "type": "express"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_update_unknown_profile(self, client: TestClient, admin_headers):
        response = client.post("/admin/shipping-profiles/sp_missing", json={"name": "x"}, headers=admin_headers)

        assert response.status_code == 404

    def test_update_rejects_null_name(self, client: TestClient, admin_headers):
        profile = self._create(client, admin_headers)

        response = client.post(
            f"/admin/shipping-profiles/{profile['id']}",
            json={"name": None},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert client.get(f"/admin/shipping-profiles/{profile['id']}", headers=admin_headers).json()[
            "shipping_profile"
        ]["name"] == "Bulky"

    def test_service_rejects_null_name(self, client: TestClient, admin_headers, db):
        profile = self._create(client, admin_headers)

        with pytest.raises(ValidationError):
            ShippingProfileService(db).update(profile["id"], {"name": None})
