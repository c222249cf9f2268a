"""
Sales API tests.

Verifies:
- POST /api/sales status codes and error bodies
- Role enforcement (ADMIN and SELLER sell, PRODUCTION cannot)
- GET /api/sales projections
"""

import pytest

from bakery.extensions import db
from bakery.models import AuditLog, FinancialMovement, Product
from bakery.services import audit_service


def _sale_body(*lines, **extra):
    body = {"items": [{"product_id": pid, "quantity": qty} for pid, qty in lines]}
    body.update(extra)
    return body


class TestCreateSaleEndpoint:

    def test_seller_creates_sale(self, client, seller_headers, bread):
        resp = client.post("/api/sales", json=_sale_body((bread.id, 2)), headers=seller_headers)

        assert resp.status_code == 201
        assert resp.json["ok"] is True
        sale = resp.json["sale"]
        assert sale["code"] == "V-000001"
        assert sale["total"] == "0.60"
        assert sale["payment_method"] == "CASH"
        assert sale["is_credit"] is False
        assert sale["status"] == "COMPLETED"
        assert db.session.get(Product, bread.id).stock == 8

    def test_admin_can_sell(self, client, admin_headers, bread):
        resp = client.post("/api/sales", json=_sale_body((bread.id, 1)), headers=admin_headers)
        assert resp.status_code == 201

    def test_production_cannot_sell(self, client, production_headers, production_user, bread):
        resp = client.post("/api/sales", json=_sale_body((bread.id, 1)), headers=production_headers)

        assert resp.status_code == 403
        assert resp.json["error"] == "Permission denied"
        assert set(resp.json["required_roles"]) == {"ADMIN", "SELLER"}
        assert db.session.get(Product, bread.id).stock == 10

        denied = db.session.query(AuditLog).filter_by(action=audit_service.ACTION_PERMISSION_DENIED).all()
        assert [e.user_id for e in denied] == [production_user.id]

    def test_requires_auth(self, client, db_session, bread):
        resp = client.post("/api/sales", json=_sale_body((bread.id, 1)))
        assert resp.status_code == 401

    def test_insufficient_stock_is_400_with_details(self, client, seller_headers, bread):
        client.post("/api/sales", json=_sale_body((bread.id, 5)), headers=seller_headers)
        resp = client.post("/api/sales", json=_sale_body((bread.id, 6)), headers=seller_headers)

        assert resp.status_code == 400
        assert resp.json["error"] == "Insufficient stock for Baguette"
        assert resp.json["details"]["available"] == 5
        assert resp.json["details"]["product_id"] == bread.id

    def test_unknown_product_is_404(self, client, seller_headers, db_session):
        resp = client.post("/api/sales", json=_sale_body((777, 1)), headers=seller_headers)
        assert resp.status_code == 404
        assert resp.json["error"] == "Product not found: 777"

    def test_unknown_customer_is_404(self, client, seller_headers, bread):
        resp = client.post(
            "/api/sales",
            json=_sale_body((bread.id, 1), customer_id=31337),
            headers=seller_headers,
        )
        assert resp.status_code == 404

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"items": []},
            {"items": "bread"},
            {"items": [{"quantity": 1}]},
            {"items": [{"product_id": 1, "quantity": 0}]},
            {"items": [{"product_id": 1, "quantity": -2}]},
            {"items": [{"product_id": 1, "quantity": 1.5}]},
            {"items": [{"product_id": 1, "quantity": 1, "unit_price": "-1"}]},
            {"items": [{"product_id": 1, "quantity": 1}], "is_credit": "yes"},
            {"items": [{"product_id": 1, "quantity": 1}], "payment_method": "BITCOIN"},
        ],
    )
    def test_malformed_body_is_400(self, client, seller_headers, bread, body):
        resp = client.post("/api/sales", json=body, headers=seller_headers)
        assert resp.status_code == 400, resp.json
        assert "error" in resp.json
        assert db.session.get(Product, bread.id).stock == 10

    def test_invalid_payment_method_lists_allowed(self, client, seller_headers, bread):
        resp = client.post(
            "/api/sales",
            json=_sale_body((bread.id, 1), payment_method="BITCOIN"),
            headers=seller_headers,
        )
        assert resp.status_code == 400
        assert "CARD" in resp.json["details"]["allowed"]

    def test_credit_sale_forces_cash_and_skips_ledger(self, client, seller_headers, bread, customer):
        resp = client.post(
            "/api/sales",
            json=_sale_body((bread.id, 2), payment_method="CARD", is_credit=True, customer_id=customer.id),
            headers=seller_headers,
        )

        assert resp.status_code == 201
        assert resp.json["sale"]["is_credit"] is True
        assert resp.json["sale"]["payment_method"] == "CASH"
        assert db.session.query(FinancialMovement).count() == 0

    def test_float_prices_do_not_drift(self, client, seller_headers, bread):
        resp = client.post(
            "/api/sales",
            json={"items": [{"product_id": bread.id, "quantity": 3, "unit_price": 0.1}]},
            headers=seller_headers,
        )
        assert resp.status_code == 201
        assert resp.json["sale"]["total"] == "0.30"


class TestListSalesEndpoint:

    def test_lists_newest_first_with_items(self, client, seller_headers, bread, croissant, customer):
        client.post("/api/sales", json=_sale_body((bread.id, 1)), headers=seller_headers)
        client.post(
            "/api/sales",
            json=_sale_body((croissant.id, 2), customer_id=customer.id),
            headers=seller_headers,
        )

        resp = client.get("/api/sales", headers=seller_headers)

        assert resp.status_code == 200
        assert [s["code"] for s in resp.json] == ["V-000002", "V-000001"]
        newest = resp.json[0]
        assert newest["customer"]["name"] == "Maria Lopez"
        assert newest["seller"]["email"] == "seller@bakery.test"
        assert newest["items"][0]["product_name"] == "Croissant"
        assert newest["items"][0]["subtotal"] == "2.50"
        assert resp.json[1]["customer"] is None

    def test_limit_and_offset(self, client, seller_headers, bread):
        for _ in range(3):
            client.post("/api/sales", json=_sale_body((bread.id, 1)), headers=seller_headers)

        resp = client.get("/api/sales?limit=1&offset=1", headers=seller_headers)
        assert [s["code"] for s in resp.json] == ["V-000002"]

    def test_negative_offset_reads_from_start(self, client, seller_headers, bread):
        for _ in range(2):
            client.post("/api/sales", json=_sale_body((bread.id, 1)), headers=seller_headers)

        resp = client.get("/api/sales?offset=-1", headers=seller_headers)

        assert resp.status_code == 200
        assert [s["code"] for s in resp.json] == ["V-000002", "V-000001"]

    def test_get_single_sale(self, client, seller_headers, bread):
        created = client.post("/api/sales", json=_sale_body((bread.id, 1)), headers=seller_headers)
        sale_id = created.json["sale"]["id"]

        resp = client.get(f"/api/sales/{sale_id}", headers=seller_headers)
        assert resp.status_code == 200
        assert resp.json["code"] == "V-000001"
        assert len(resp.json["items"]) == 1

    def test_get_missing_sale_is_404(self, client, seller_headers):
        resp = client.get("/api/sales/99999", headers=seller_headers)
        assert resp.status_code == 404

    def test_production_cannot_list(self, client, production_headers):
        resp = client.get("/api/sales", headers=production_headers)
        assert resp.status_code == 403
