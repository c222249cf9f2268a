from __future__ import annotations

from ..extensions import db
from bakery.money import format_money
from bakery.time_utils import to_utc_z, utcnow

MOVEMENT_INCOME = "INCOME"
MOVEMENT_EXPENSE = "EXPENSE"
FINANCIAL_MOVEMENT_TYPES = (MOVEMENT_INCOME, MOVEMENT_EXPENSE)

# Category used for income posted by non-credit sales
CATEGORY_SALE = "sale"


class FinancialMovement(db.Model):
    """Cash-flow ledger entry (income or expense). Append-only."""
    __tablename__ = "financial_movements"
    __table_args__ = (
        db.Index("ix_financial_movements_type_created", "movement_type", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    movement_type = db.Column(db.String(16), nullable=False, index=True)
    category = db.Column(db.String(64), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    description = db.Column(db.String(255), nullable=True)

    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    created_by = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "movement_type": self.movement_type,
            "category": self.category,
            "amount": format_money(self.amount),
            "description": self.description,
            "created_by_id": self.created_by_id,
            "created_at": to_utc_z(self.created_at),
        }
