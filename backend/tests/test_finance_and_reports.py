"""
Cash ledger, cash summary and general report tests.
"""

from datetime import timedelta

import pytest

from bakery.extensions import db
from bakery.models import FinancialMovement, Product, Sale
from bakery.services import report_service
from bakery.services.sales_service import SaleItemRequest, SaleRequest, get_sales_service


def _sell(actor_id, *lines, **kwargs):
    items = tuple(SaleItemRequest(pid, qty) for pid, qty in lines)
    return get_sales_service().create_sale(actor_id, SaleRequest(items=items, **kwargs))


def _sale_day(sale) -> str:
    return db.session.get(Sale, sale.id).created_at.date().isoformat()


# =============================================================================
# LEDGER API
# =============================================================================


class TestFinanceMovements:

    def test_admin_records_expense(self, client, admin_headers, admin_user):
        resp = client.post(
            "/api/finance/movements",
            json={"movement_type": "EXPENSE", "category": "flour", "amount": "45.5", "description": "25kg sack"},
            headers=admin_headers,
        )

        assert resp.status_code == 201
        movement = resp.json["movement"]
        assert movement["amount"] == "45.50"
        assert movement["category"] == "flour"
        assert movement["created_by_id"] == admin_user.id

    def test_type_alias_accepted(self, client, admin_headers):
        resp = client.post(
            "/api/finance/movements",
            json={"type": "INCOME", "category": "catering", "amount": 120},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        assert resp.json["movement"]["movement_type"] == "INCOME"

    @pytest.mark.parametrize(
        "body",
        [
            {"category": "flour", "amount": "10"},
            {"movement_type": "EXPENSE", "amount": "10"},
            {"movement_type": "EXPENSE", "category": "flour"},
            {"movement_type": "REFUND", "category": "flour", "amount": "10"},
            {"movement_type": "EXPENSE", "category": "flour", "amount": "0"},
            {"movement_type": "EXPENSE", "category": "flour", "amount": "-3"},
            {"movement_type": "EXPENSE", "category": "x" * 65, "amount": "3"},
        ],
    )
    def test_invalid_movement_is_400(self, client, admin_headers, body):
        resp = client.post("/api/finance/movements", json=body, headers=admin_headers)
        assert resp.status_code == 400
        assert db.session.query(FinancialMovement).count() == 0

    def test_seller_cannot_record(self, client, seller_headers):
        resp = client.post(
            "/api/finance/movements",
            json={"movement_type": "EXPENSE", "category": "flour", "amount": "1"},
            headers=seller_headers,
        )
        assert resp.status_code == 403

    def test_list_includes_recording_user(self, client, admin_headers, seller_headers, seller_user, bread):
        _sell(seller_user.id, (bread.id, 2))

        resp = client.get("/api/finance/movements", headers=seller_headers)

        assert resp.status_code == 200
        assert resp.json[0]["user"] == {"id": seller_user.id, "name": "Sam Seller"}
        assert resp.json[0]["description"] == "Sale V-000001"


# =============================================================================
# CASH SUMMARY
# =============================================================================


class TestCashSummary:

    def test_income_counts_only_non_credit_sales(self, client, admin_headers, seller_user, bread, croissant, customer):
        cash_sale = _sell(seller_user.id, (bread.id, 2))
        _sell(seller_user.id, (croissant.id, 2), is_credit=True, customer_id=customer.id)
        client.post(
            "/api/finance/movements",
            json={"movement_type": "EXPENSE", "category": "butter", "amount": "0.20"},
            headers=admin_headers,
        )

        resp = client.get(f"/api/cash/summary?date={_sale_day(cash_sale)}", headers=admin_headers)

        assert resp.status_code == 200
        assert resp.json["summary"] == {
            "income": "0.60",
            "credit": "2.50",
            "expenses": "0.20",
            "balance": "0.40",
        }
        assert [(line["sale_code"], line["customer"]) for line in resp.json["sales"]] == [
            ("V-000001", report_service.COUNTER_SALE_LABEL),
            ("V-000002", "Maria Lopez"),
        ]
        assert resp.json["expenses_detail"] == [{"category": "butter", "description": "", "amount": "0.20"}]

    def test_other_days_excluded(self, seller_user, bread):
        sale = _sell(seller_user.id, (bread.id, 1))
        row = db.session.get(Sale, sale.id)
        row.created_at = row.created_at - timedelta(days=2)
        db.session.commit()

        today = (row.created_at + timedelta(days=2)).date().isoformat()
        summary = report_service.cash_summary(today)
        assert summary["sales"] == []
        assert summary["summary"]["income"] == "0.00"

    def test_every_role_can_view(self, client, production_headers):
        resp = client.get("/api/cash/summary", headers=production_headers)
        assert resp.status_code == 200
        assert resp.json["summary"]["balance"] == "0.00"

    def test_bad_date_is_400(self, client, admin_headers):
        resp = client.get("/api/cash/summary?date=19-10-2026", headers=admin_headers)
        assert resp.status_code == 400


# =============================================================================
# GENERAL REPORT
# =============================================================================


class TestGeneralReport:

    def test_sales_by_day_and_top_products(self, client, seller_headers, seller_user, bread, croissant):
        sale = _sell(seller_user.id, (bread.id, 5), (croissant.id, 1))
        _sell(seller_user.id, (croissant.id, 2))
        day = _sale_day(sale)

        resp = client.get(f"/api/reports/summary?date={day}", headers=seller_headers)

        assert resp.status_code == 200
        assert resp.json["sales_by_day"] == [{"date": day, "sales_count": 2, "total": "5.25"}]
        assert [(p["name"], p["quantity_sold"], p["total"]) for p in resp.json["top_products"]] == [
            ("Baguette", 5, "1.50"),
            ("Croissant", 3, "3.75"),
        ]
        assert resp.json["finances"] == {"income": "5.25", "expenses": "0.00", "balance": "5.25"}

    def test_deleted_product_reported_with_placeholder(self, seller_user, bread):
        sale = _sell(seller_user.id, (bread.id, 1))
        db.session.query(Product).filter(Product.id == bread.id).delete()
        db.session.commit()

        report = report_service.general_summary(_sale_day(sale))
        assert report["top_products"][0]["name"] == "Unknown product"

    def test_date_range(self, seller_user, bread):
        sale = _sell(seller_user.id, (bread.id, 1))
        day = db.session.get(Sale, sale.id).created_at.date()
        start = (day - timedelta(days=3)).isoformat()

        report = report_service.general_summary(start, day.isoformat())

        assert report["start_date"] == start
        assert report["end_date"] == day.isoformat()
        assert len(report["sales_by_day"]) == 1

    def test_reversed_range_is_400(self, client, seller_headers):
        resp = client.get(
            "/api/reports/summary?start_date=2026-10-10&end_date=2026-10-01",
            headers=seller_headers,
        )
        assert resp.status_code == 400

    def test_requires_auth(self, client, db_session):
        assert client.get("/api/reports/summary").status_code == 401
