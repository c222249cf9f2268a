# Overview: Ledger Store; cash-flow income and expense entries.

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..errors import ValidationError
from ..models import FinancialMovement
from ..models.finance import FINANCIAL_MOVEMENT_TYPES
from ..money import to_money, quantize, ZERO
"""
Ledger invariants:
- Append-only: entries are never edited or deleted.
- append_movement() never commits; record_movement() is the standalone
  entry point for manual bookkeeping and commits on its own.
- Non-credit sales post exactly one INCOME entry in the sale transaction.
"""


def append_movement(
    *,
    movement_type: str,
    category: str,
    amount: Decimal,
    actor_id: int,
    description: str | None = None,
) -> FinancialMovement:
    if movement_type not in FINANCIAL_MOVEMENT_TYPES:
        raise ValidationError(f"Invalid movement type: {movement_type}")

    movement = FinancialMovement(
        movement_type=movement_type,
        category=category,
        amount=quantize(amount),
        description=description,
        created_by_id=actor_id,
    )
    db.session.add(movement)
    db.session.flush()
    return movement


def record_movement(payload: dict, *, actor_id: int) -> FinancialMovement:
    """Validate a manual ledger entry from JSON and commit it."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    movement_type = payload.get("movement_type") or payload.get("type")
    category = (payload.get("category") or "").strip()
    raw_amount = payload.get("amount")

    if not movement_type or not category or raw_amount in (None, ""):
        raise ValidationError("movement_type, category and amount are required")
    if movement_type not in FINANCIAL_MOVEMENT_TYPES:
        raise ValidationError(
            f"Invalid movement type: {movement_type}",
            details={"allowed": list(FINANCIAL_MOVEMENT_TYPES)},
        )
    if len(category) > 64:
        raise ValidationError("category exceeds max length 64")

    amount = to_money(raw_amount, "amount", allow_zero=False)
    description = payload.get("description")
    if description is not None:
        description = str(description).strip()[:255] or None

    movement = append_movement(
        movement_type=movement_type,
        category=category,
        amount=amount,
        actor_id=actor_id,
        description=description,
    )
    db.session.commit()
    return movement


def list_movements(*, limit: int | None = None) -> list[FinancialMovement]:
    query = (
        db.session.query(FinancialMovement)
        .options(joinedload(FinancialMovement.created_by))
        .order_by(FinancialMovement.created_at.desc(), FinancialMovement.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def movements_between(start, end) -> list[FinancialMovement]:
    return (
        db.session.query(FinancialMovement)
        .filter(FinancialMovement.created_at >= start, FinancialMovement.created_at < end)
        .order_by(FinancialMovement.created_at.asc(), FinancialMovement.id.asc())
        .all()
    )


def sum_by_type(movement_type: str, start, end) -> Decimal:
    total = (
        db.session.query(func.coalesce(func.sum(FinancialMovement.amount), 0))
        .filter(
            FinancialMovement.movement_type == movement_type,
            FinancialMovement.created_at >= start,
            FinancialMovement.created_at < end,
        )
        .scalar()
    )
    return quantize(Decimal(str(total or ZERO)))
