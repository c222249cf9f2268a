# Overview: Daily cash summary and sales/finance report aggregations.

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy import func

from ..extensions import db
from ..errors import ValidationError
from ..models import Product, Sale, SaleItem
from ..models.finance import MOVEMENT_EXPENSE, MOVEMENT_INCOME
from ..models.sales import STATUS_COMPLETED
from ..money import ZERO, format_money, quantize
from bakery.time_utils import day_bounds
from . import finance_service
from .sale_query_service import UNKNOWN_PRODUCT_LABEL, get_sale_query_service

COUNTER_SALE_LABEL = "Counter sale"
TOP_PRODUCTS_LIMIT = 10

# Longest range the general report accepts
MAX_REPORT_DAYS = 366


def _as_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    return quantize(Decimal(str(value)))


def _day_range(day: str | None) -> tuple[datetime, datetime]:
    try:
        return day_bounds(day)
    except ValueError:
        raise ValidationError("date must be formatted YYYY-MM-DD")


def cash_summary(day: str | None = None) -> dict:
    """
    Cash-drawer view of one UTC day.

    income counts non-credit sales only; credit sales are reported apart
    because no cash changed hands.
    """
    start, end = _day_range(day)
    sales = get_sale_query_service().completed_sales_between(start, end)

    income = quantize(sum((sale.total for sale in sales if not sale.is_credit), ZERO))
    credit = quantize(sum((sale.total for sale in sales if sale.is_credit), ZERO))

    expense_rows = [
        m for m in finance_service.movements_between(start, end)
        if m.movement_type == MOVEMENT_EXPENSE
    ]
    expenses = quantize(sum((m.amount for m in expense_rows), ZERO))

    lines = []
    for sale in sales:
        for item in sale.items:
            lines.append({
                "sale_code": sale.code,
                "customer": sale.customer.name if sale.customer else COUNTER_SALE_LABEL,
                "product": item.product.name if item.product else UNKNOWN_PRODUCT_LABEL,
                "quantity": item.quantity,
                "unit_price": format_money(item.unit_price),
                "subtotal": format_money(item.subtotal),
                "payment_method": sale.payment_method,
                "is_credit": sale.is_credit,
            })

    return {
        "date": start.date().isoformat(),
        "summary": {
            "income": format_money(income),
            "credit": format_money(credit),
            "expenses": format_money(expenses),
            "balance": format_money(income - expenses),
        },
        "sales": lines,
        "expenses_detail": [
            {
                "category": m.category,
                "description": m.description or "",
                "amount": format_money(m.amount),
            }
            for m in expense_rows
        ],
    }


def _sales_by_day(start: datetime, end: datetime) -> list[dict]:
    day_expr = func.date(Sale.created_at)
    rows = (
        db.session.query(
            day_expr.label("day"),
            func.count(Sale.id).label("sales_count"),
            func.coalesce(func.sum(Sale.total), 0).label("total"),
        )
        .filter(
            Sale.status == STATUS_COMPLETED,
            Sale.created_at >= start,
            Sale.created_at < end,
        )
        .group_by(day_expr)
        .order_by(day_expr.asc())
        .all()
    )
    return [
        {
            "date": str(row.day),
            "sales_count": int(row.sales_count),
            "total": format_money(_as_decimal(row.total)),
        }
        for row in rows
    ]


def _top_products(start: datetime, end: datetime) -> list[dict]:
    quantity_sum = func.sum(SaleItem.quantity)
    rows = (
        db.session.query(
            SaleItem.product_id,
            Product.name,
            quantity_sum.label("quantity"),
            func.sum(SaleItem.subtotal).label("total"),
        )
        .join(Sale, Sale.id == SaleItem.sale_id)
        .outerjoin(Product, Product.id == SaleItem.product_id)
        .filter(
            Sale.status == STATUS_COMPLETED,
            Sale.created_at >= start,
            Sale.created_at < end,
        )
        .group_by(SaleItem.product_id, Product.name)
        .order_by(quantity_sum.desc(), SaleItem.product_id.asc())
        .limit(TOP_PRODUCTS_LIMIT)
        .all()
    )
    return [
        {
            "product_id": row.product_id,
            "name": row.name or UNKNOWN_PRODUCT_LABEL,
            "quantity_sold": int(row.quantity or 0),
            "total": format_money(_as_decimal(row.total)),
        }
        for row in rows
    ]


def general_summary(start_day: str | None = None, end_day: str | None = None) -> dict:
    """
    Sales per day, best sellers and ledger totals for [start_day, end_day].

    Both bounds are inclusive calendar days; omitted bounds mean today
    (or start_day when only end_day is missing).
    """
    start, _ = _day_range(start_day)
    _, end = _day_range(end_day or start_day)
    if end <= start:
        raise ValidationError("end date must not be before start date")
    if end - start > timedelta(days=MAX_REPORT_DAYS):
        raise ValidationError(f"report range cannot exceed {MAX_REPORT_DAYS} days")

    income = finance_service.sum_by_type(MOVEMENT_INCOME, start, end)
    expenses = finance_service.sum_by_type(MOVEMENT_EXPENSE, start, end)

    return {
        "start_date": start.date().isoformat(),
        "end_date": (end - timedelta(days=1)).date().isoformat(),
        "sales_by_day": _sales_by_day(start, end),
        "top_products": _top_products(start, end),
        "finances": {
            "income": format_money(income),
            "expenses": format_money(expenses),
            "balance": format_money(income - expenses),
        },
    }
