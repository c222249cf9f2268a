# backend/bakery/services/catalog_service.py
"""
Catalog Store: products and their sellable stock.

Stock is a mutable counter on Product. Every change to it (initial stock,
admin corrections, replenishment, sales) writes a matching InventoryMovement
in the same commit, so stock always equals IN minus OUT.
"""
from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, InsufficientStockError, ProductNotFoundError
from ..models import Product
from ..models.inventory import MOVEMENT_IN, MOVEMENT_OUT
from .concurrency import begin_write_transaction, lock_for_update
from .inventory_service import append_movement

PRODUCT_MUTABLE_FIELDS = {"code", "name", "description", "price", "stock", "is_active"}

INITIAL_STOCK_REASON = "Initial stock"
MANUAL_ADJUSTMENT_REASON = "Manual adjustment"


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def get_product_by_code(code: str) -> Product:
    product = db.session.query(Product).filter_by(code=code).first()
    if product is None:
        raise ProductNotFoundError(code)
    return product


def list_products(*, include_inactive: bool = False) -> list[Product]:
    query = db.session.query(Product)
    if not include_inactive:
        query = query.filter(Product.is_active.is_(True))
    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def _ensure_code_available(code: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Product.id).filter(Product.code == code)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Product code already exists: {code}")


def create_product(*, patch: dict, actor_id: int) -> Product:
    """
    Create product using a validated patch dict.

    A starting stock above zero is logged as an IN movement in the same commit.

    Raises:
        ConflictError: If the code already exists
    """
    _ensure_code_available(patch["code"])

    product = Product()
    apply_product_patch(product, patch)
    db.session.add(product)
    try:
        db.session.flush()
        initial_stock = patch.get("stock") or 0
        if initial_stock > 0:
            append_movement(
                product_id=product.id,
                quantity=initial_stock,
                movement_type=MOVEMENT_IN,
                reason=INITIAL_STOCK_REASON,
                actor_id=actor_id,
            )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Product code already exists: {patch['code']}")
    return product


def update_product(product_id: int, *, patch: dict, actor_id: int) -> Product:
    """
    Partial update.

    A stock edit is a manual correction: the difference is logged as an IN
    or OUT movement in the same commit, with the row locked like a sale.
    """
    if "stock" in patch:
        begin_write_transaction()
        query = db.session.query(Product).filter(Product.id == product_id).populate_existing()
        product = lock_for_update(query).first()
        if product is None:
            db.session.rollback()
            raise ProductNotFoundError(product_id)
    else:
        product = get_product(product_id)

    if "code" in patch and patch["code"] != product.code:
        try:
            _ensure_code_available(patch["code"], exclude_id=product.id)
        except ConflictError:
            db.session.rollback()
            raise

    previous_stock = product.stock
    apply_product_patch(product, patch)
    try:
        delta = product.stock - previous_stock
        if delta:
            append_movement(
                product_id=product.id,
                quantity=abs(delta),
                movement_type=MOVEMENT_IN if delta > 0 else MOVEMENT_OUT,
                reason=MANUAL_ADJUSTMENT_REASON,
                actor_id=actor_id,
            )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Product update violates a uniqueness or stock constraint")
    return product


def deactivate_product(product_id: int) -> Product:
    product = get_product(product_id)
    product.is_active = False
    db.session.commit()
    return product


def increment_stock(
    product_id: int,
    quantity: int,
    *,
    actor_id: int,
    reason: str = "Stock replenishment",
) -> Product:
    """Add units (production batch, delivery) and log an IN movement."""
    product = get_product(product_id)

    db.session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
        .execution_options(synchronize_session=False)
    )
    append_movement(
        product_id=product_id,
        quantity=quantity,
        movement_type=MOVEMENT_IN,
        reason=reason,
        actor_id=actor_id,
    )
    db.session.commit()
    db.session.refresh(product)
    return product


def decrement_stock(product: Product, quantity: int) -> None:
    """
    Conditionally take `quantity` units inside the caller's transaction.

    The UPDATE only matches while stock >= quantity, so a concurrent sale
    that already consumed the units leaves zero rows affected and we raise
    instead of clamping. Does not commit.
    """
    result = db.session.execute(
        update(Product)
        .where(Product.id == product.id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        current = db.session.query(Product.stock).filter_by(id=product.id).scalar()
        raise InsufficientStockError(product.id, product.name, quantity, int(current or 0))
