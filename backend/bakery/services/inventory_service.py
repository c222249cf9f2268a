# Overview: Inventory Movement Store; append-only log of stock changes.

from __future__ import annotations

from ..extensions import db
from ..errors import ValidationError
from ..models import InventoryMovement
from ..models.inventory import MOVEMENT_TYPES
"""
Invariants:
- Movements are appended inside the same DB transaction as the stock change
  they describe; this module never commits.
- No updates or deletes of existing movements.
- quantity is always positive; direction lives in movement_type.
"""


def append_movement(
    *,
    product_id: int,
    quantity: int,
    movement_type: str,
    reason: str,
    actor_id: int,
    sale_id: int | None = None,
) -> InventoryMovement:
    if movement_type not in MOVEMENT_TYPES:
        raise ValidationError(f"Invalid movement type: {movement_type}")
    if quantity <= 0:
        raise ValidationError("quantity must be a positive integer")

    movement = InventoryMovement(
        product_id=product_id,
        quantity=quantity,
        movement_type=movement_type,
        reason=reason,
        sale_id=sale_id,
        created_by_id=actor_id,
    )
    db.session.add(movement)
    db.session.flush()  # ensures movement.id is assigned without committing
    return movement


def list_movements(
    *,
    product_id: int | None = None,
    sale_id: int | None = None,
    limit: int = 100,
) -> list[InventoryMovement]:
    query = db.session.query(InventoryMovement)
    if product_id is not None:
        query = query.filter(InventoryMovement.product_id == product_id)
    if sale_id is not None:
        query = query.filter(InventoryMovement.sale_id == sale_id)
    return (
        query.order_by(InventoryMovement.created_at.desc(), InventoryMovement.id.desc())
        .limit(limit)
        .all()
    )
