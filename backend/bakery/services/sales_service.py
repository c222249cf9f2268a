"""
Sale Transaction Engine.

create_sale() is the one operation in the backend with real invariants:
stock is checked and consumed, the sale and its items are written, and the
cash ledger is posted, all in a single database transaction. Either every
row lands or none does.

Post-commit listeners (the audit log) run only after a successful commit
and cannot undo or fail the sale.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import (
    CustomerNotFoundError,
    InsufficientStockError,
    PersistenceError,
    ProductNotFoundError,
    ServiceError,
    ValidationError,
)
from ..models import Customer, Product, Sale, SaleItem
from ..models.finance import CATEGORY_SALE, MOVEMENT_INCOME
from ..models.inventory import MOVEMENT_OUT
from ..models.sales import (
    CREDIT_PAYMENT_METHOD,
    PAYMENT_CASH,
    PAYMENT_METHODS,
    STATUS_COMPLETED,
)
from ..money import ZERO, quantize, to_money
from ..validation import coerce_int, require_positive_int
from . import finance_service
from .catalog_service import decrement_stock
from .concurrency import begin_write_transaction, lock_for_update
from .document_service import SALE_CODE_PREFIX, SALE_DOCUMENT_TYPE, next_document_number
from .inventory_service import append_movement

SaleListener = Callable[[Sale, int], None]


@dataclass(frozen=True)
class SaleItemRequest:
    product_id: int
    quantity: int
    # None snapshots the product's catalog price
    unit_price: Decimal | None = None


@dataclass(frozen=True)
class SaleRequest:
    items: tuple[SaleItemRequest, ...]
    payment_method: str = PAYMENT_CASH
    is_credit: bool = False
    customer_id: int | None = None


def parse_sale_request(payload) -> SaleRequest:
    """
    Build a SaleRequest from a JSON body.

    Raises ValidationError for every malformed field; nothing has touched
    the database at this point.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        if raw.get("product_id") is None:
            raise ValidationError(f"items[{index}].product_id is required")

        product_id = coerce_int(raw["product_id"], f"items[{index}].product_id")
        quantity = require_positive_int(raw.get("quantity"), f"items[{index}].quantity")

        unit_price = raw.get("unit_price")
        if unit_price is not None:
            unit_price = to_money(unit_price, f"items[{index}].unit_price")

        items.append(SaleItemRequest(product_id=product_id, quantity=quantity, unit_price=unit_price))

    is_credit = payload.get("is_credit", False)
    if is_credit is None:
        is_credit = False
    if not isinstance(is_credit, bool):
        raise ValidationError("is_credit must be a boolean")

    payment_method = payload.get("payment_method") or PAYMENT_CASH
    if is_credit:
        # Nothing has been paid yet; the requested method is discarded
        payment_method = CREDIT_PAYMENT_METHOD
    elif payment_method not in PAYMENT_METHODS:
        raise ValidationError(
            f"Invalid payment method: {payment_method}",
            details={"allowed": list(PAYMENT_METHODS)},
        )

    customer_id = payload.get("customer_id")
    if customer_id is not None:
        customer_id = coerce_int(customer_id, "customer_id")

    return SaleRequest(
        items=tuple(items),
        payment_method=payment_method,
        is_credit=is_credit,
        customer_id=customer_id,
    )


class SalesService:
    """
    Creates sales atomically against the injected Flask-SQLAlchemy handle.

    Built once in create_app() and stored in app.extensions; routes reach it
    through get_sales_service().
    """

    def __init__(self, database, listeners: list[SaleListener] | None = None):
        self.db = database
        self._listeners: list[SaleListener] = list(listeners or [])

    def subscribe(self, listener: SaleListener) -> None:
        """Register a callable(sale, actor_id) run after each committed sale."""
        self._listeners.append(listener)

    def create_sale(self, actor_id: int, request: SaleRequest) -> Sale:
        """
        Validate, price and persist a sale in one transaction.

        Raises:
            ValidationError: empty items, inactive product
            CustomerNotFoundError / ProductNotFoundError: missing reference
            InsufficientStockError: first item (in request order) whose
                cumulative quantity exceeds stock
            PersistenceError: storage fault (details only in the server log)
        """
        if not request.items:
            raise ValidationError("items must be a non-empty list")

        session = self.db.session
        try:
            begin_write_transaction()
            sale = self._create_sale_locked(actor_id, request)
            session.commit()
        except ServiceError:
            session.rollback()
            raise
        except SQLAlchemyError as exc:
            session.rollback()
            current_app.logger.exception("Sale transaction failed for user %s", actor_id)
            raise PersistenceError() from exc

        current_app.logger.info(
            "Sale %s committed by user %s: total=%s items=%d credit=%s",
            sale.code, actor_id, sale.total, len(request.items), sale.is_credit,
        )
        self._notify(sale, actor_id)
        return sale

    def _load_products(self, items) -> dict[int, Product]:
        # Lock in id order so two sales touching the same products cannot deadlock
        product_ids = sorted({item.product_id for item in items})
        query = (
            self.db.session.query(Product)
            .filter(Product.id.in_(product_ids))
            .order_by(Product.id.asc())
            .populate_existing()
        )
        return {p.id: p for p in lock_for_update(query).all()}

    def _create_sale_locked(self, actor_id: int, request: SaleRequest) -> Sale:
        session = self.db.session

        if request.customer_id is not None:
            if session.get(Customer, request.customer_id) is None:
                raise CustomerNotFoundError(request.customer_id)

        products = self._load_products(request.items)

        # Validate and price every line before the first write
        requested: dict[int, int] = {}
        priced_lines = []
        for line in request.items:
            product = products.get(line.product_id)
            if product is None:
                raise ProductNotFoundError(line.product_id)
            if not product.is_active:
                raise ValidationError(
                    f"Product is inactive: {product.name}",
                    details={"product_id": product.id},
                )

            requested[product.id] = requested.get(product.id, 0) + line.quantity
            if product.stock < requested[product.id]:
                raise InsufficientStockError(product.id, product.name, requested[product.id], product.stock)

            unit_price = line.unit_price if line.unit_price is not None else quantize(product.price)
            subtotal = quantize(unit_price * line.quantity)
            priced_lines.append((product, line.quantity, unit_price, subtotal))

        total = quantize(sum((subtotal for _, _, _, subtotal in priced_lines), ZERO))

        sale = Sale(
            code=next_document_number(document_type=SALE_DOCUMENT_TYPE, prefix=SALE_CODE_PREFIX),
            seller_id=actor_id,
            customer_id=request.customer_id,
            total=total,
            payment_method=CREDIT_PAYMENT_METHOD if request.is_credit else request.payment_method,
            is_credit=request.is_credit,
            status=STATUS_COMPLETED,
        )
        session.add(sale)
        session.flush()

        for product, quantity, unit_price, subtotal in priced_lines:
            sale.items.append(
                SaleItem(
                    product_id=product.id,
                    quantity=quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                )
            )
            decrement_stock(product, quantity)
            append_movement(
                product_id=product.id,
                quantity=quantity,
                movement_type=MOVEMENT_OUT,
                reason=f"Sale {sale.code}",
                actor_id=actor_id,
                sale_id=sale.id,
            )

        # Credit sales are receivables: no cash has moved yet
        if not request.is_credit:
            finance_service.append_movement(
                movement_type=MOVEMENT_INCOME,
                category=CATEGORY_SALE,
                amount=total,
                actor_id=actor_id,
                description=f"Sale {sale.code}",
            )

        return sale

    def _notify(self, sale: Sale, actor_id: int) -> None:
        for listener in self._listeners:
            try:
                listener(sale, actor_id)
            except Exception:
                current_app.logger.exception(
                    "Post-commit listener %r failed for sale %s", listener, sale.id
                )


def get_sales_service() -> SalesService:
    return current_app.extensions["bakery.sales"]
