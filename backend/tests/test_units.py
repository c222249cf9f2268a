"""Unit tests for money handling, the role policy and sale request parsing."""

from decimal import Decimal

import pytest
from flask import g

from bakery.decorators import require_role
from bakery.errors import ValidationError
from bakery.extensions import db
from bakery.models import AuditLog
from bakery.money import format_money, to_money
from bakery.permissions import (
    ALL_ROLES,
    CAN_MANAGE_CATALOG,
    CAN_REPLENISH_STOCK,
    CAN_SELL,
    ROLE_ADMIN,
    ROLE_PRODUCTION,
    ROLE_SELLER,
    is_allowed,
)
from bakery.services import audit_service
from bakery.services.sales_service import parse_sale_request
from bakery.services.session_service import SessionContext
from bakery.time_utils import day_bounds, to_utc_z


class TestMoney:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (0.3, Decimal("0.30")),
            ("0.1", Decimal("0.10")),
            (2, Decimal("2.00")),
            ("1.005", Decimal("1.01")),
            ("  4.5 ", Decimal("4.50")),
        ],
    )
    def test_to_money(self, raw, expected):
        assert to_money(raw) == expected

    @pytest.mark.parametrize("raw", [None, True, "abc", "-0.01", "NaN", "Infinity", [1], "99999999999"])
    def test_to_money_rejects(self, raw):
        with pytest.raises(ValidationError):
            to_money(raw)

    def test_zero_can_be_refused(self):
        with pytest.raises(ValidationError):
            to_money("0", allow_zero=False)

    def test_format_money(self):
        assert format_money(Decimal("0.6")) == "0.60"
        assert format_money(0.1 + 0.2) == "0.30"
        assert format_money(None) is None


class TestRolePolicy:

    def test_sell_capability(self):
        assert is_allowed(ROLE_ADMIN, CAN_SELL)
        assert is_allowed(ROLE_SELLER, CAN_SELL)
        assert not is_allowed(ROLE_PRODUCTION, CAN_SELL)

    def test_stock_capability(self):
        assert is_allowed(ROLE_PRODUCTION, CAN_REPLENISH_STOCK)
        assert not is_allowed(ROLE_SELLER, CAN_REPLENISH_STOCK)

    def test_catalog_writes_admin_only(self):
        assert [r for r in ALL_ROLES if is_allowed(r, CAN_MANAGE_CATALOG)] == [ROLE_ADMIN]

    def test_unknown_role_denied_everywhere(self):
        assert not is_allowed("OWNER", CAN_SELL)
        assert not is_allowed(None, ())

    def test_empty_requirement_admits_any_valid_role(self):
        assert all(is_allowed(r, ()) for r in ALL_ROLES)


class TestRequireRole:

    def _call(self, app, user, *roles):
        view = require_role(*roles)(lambda: ("ok", 200))
        with app.test_request_context("/api/sales", method="POST"):
            g.current_user = user
            g.session_context = SessionContext(user=user, session=None)
            try:
                return view()
            finally:
                g.pop("current_user")
                g.pop("session_context")

    def test_admits_session_role(self, app, seller_user):
        assert self._call(app, seller_user, *CAN_SELL) == ("ok", 200)

    def test_denial_is_audited_against_session_actor(self, app, production_user):
        body, status = self._call(app, production_user, *CAN_SELL)

        assert status == 403
        assert body.json["required_roles"] == list(CAN_SELL)
        [entry] = db.session.query(AuditLog).filter_by(action=audit_service.ACTION_PERMISSION_DENIED).all()
        assert entry.user_id == production_user.id
        assert entry.details.startswith("POST /api/sales")

    def test_missing_session_is_401(self, app):
        view = require_role(ROLE_ADMIN)(lambda: ("ok", 200))
        with app.test_request_context("/api/sales"):
            g.pop("current_user", None)
            g.pop("session_context", None)
            body, status = view()
        assert status == 401


class TestParseSaleRequest:

    def test_defaults(self):
        request = parse_sale_request({"items": [{"product_id": "3", "quantity": 2}]})

        assert request.items[0].product_id == 3
        assert request.items[0].unit_price is None
        assert request.payment_method == "CASH"
        assert request.is_credit is False
        assert request.customer_id is None

    def test_null_is_credit_means_false(self):
        request = parse_sale_request({"items": [{"product_id": 1, "quantity": 1}], "is_credit": None})
        assert request.is_credit is False

    def test_credit_overrides_payment_method(self):
        request = parse_sale_request({
            "items": [{"product_id": 1, "quantity": 1}],
            "payment_method": "DIGITAL_WALLET",
            "is_credit": True,
        })
        assert request.payment_method == "CASH"

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {"items": [1]},
            {"items": [{"product_id": True, "quantity": 1}]},
            {"items": [{"product_id": 1, "quantity": "1e3"}]},
            {"items": [{"product_id": 1, "quantity": 1}], "customer_id": "abc"},
        ],
    )
    def test_rejects(self, payload):
        with pytest.raises(ValidationError):
            parse_sale_request(payload)


class TestTimeUtils:

    def test_day_bounds_half_open(self):
        start, end = day_bounds("2026-10-19")
        assert start.isoformat() == "2026-10-19T00:00:00"
        assert end.isoformat() == "2026-10-20T00:00:00"

    def test_day_bounds_rejects_garbage(self):
        with pytest.raises(ValueError):
            day_bounds("yesterday")

    def test_to_utc_z(self):
        start, _ = day_bounds("2026-01-02")
        assert to_utc_z(start) == "2026-01-02T00:00:00Z"
