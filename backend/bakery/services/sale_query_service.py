# Overview: Read-side projections of sales with items, customer and seller.

from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy.orm import joinedload, selectinload

from ..errors import NotFoundError
from ..models import Sale, SaleItem
from ..models.sales import STATUS_COMPLETED

UNKNOWN_PRODUCT_LABEL = "Unknown product"


def project_item(item: SaleItem) -> dict:
    data = item.to_dict()
    product = item.product
    if product is None:
        data["product"] = None
        data["product_name"] = UNKNOWN_PRODUCT_LABEL
    else:
        data["product"] = {"id": product.id, "code": product.code, "name": product.name}
        data["product_name"] = product.name
    return data


def project_sale(sale: Sale) -> dict:
    data = sale.to_dict()
    data["customer"] = sale.customer.to_dict() if sale.customer else None
    data["seller"] = sale.seller.to_summary() if sale.seller else None
    data["items"] = [project_item(item) for item in sale.items]
    return data


class SaleQueryService:
    """Read-only; never flushes or commits."""

    def __init__(self, database):
        self.db = database

    def _base_query(self):
        return self.db.session.query(Sale).options(
            selectinload(Sale.items).joinedload(SaleItem.product),
            joinedload(Sale.customer),
            joinedload(Sale.seller),
        )

    def list_sales(self, *, limit: int | None = None, offset: int | None = None) -> list[dict]:
        """Sales newest first, ties broken by id so the order is stable."""
        query = self._base_query().order_by(Sale.created_at.desc(), Sale.id.desc())
        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)
        return [project_sale(sale) for sale in query.all()]

    def get_sale(self, sale_id: int) -> dict:
        sale = self._base_query().filter(Sale.id == sale_id).first()
        if sale is None:
            raise NotFoundError(f"Sale not found: {sale_id}")
        return project_sale(sale)

    def completed_sales_between(self, start: datetime, end: datetime) -> list[Sale]:
        """Completed sales with created_at in [start, end), oldest first."""
        return (
            self._base_query()
            .filter(
                Sale.status == STATUS_COMPLETED,
                Sale.created_at >= start,
                Sale.created_at < end,
            )
            .order_by(Sale.created_at.asc(), Sale.id.asc())
            .all()
        )


def get_sale_query_service() -> SaleQueryService:
    return current_app.extensions["bakery.sale_queries"]
