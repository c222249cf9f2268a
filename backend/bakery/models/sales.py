from __future__ import annotations

from ..extensions import db
from bakery.money import format_money
from bakery.time_utils import to_utc_z, utcnow

STATUS_PENDING = "PENDING"
STATUS_COMPLETED = "COMPLETED"
SALE_STATUSES = (STATUS_PENDING, STATUS_COMPLETED)

PAYMENT_CASH = "CASH"
PAYMENT_CARD = "CARD"
PAYMENT_DIGITAL_WALLET = "DIGITAL_WALLET"
PAYMENT_BANK_TRANSFER = "BANK_TRANSFER"
PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD, PAYMENT_DIGITAL_WALLET, PAYMENT_BANK_TRANSFER)

# Stored on credit sales, where no payment has happened yet
CREDIT_PAYMENT_METHOD = PAYMENT_CASH


class Sale(db.Model):
    """
    Sale header. Items are created in the same transaction and owned by it.

    total always equals the sum of the items' subtotals. A sale without
    customer_id is a counter sale; is_credit marks an unpaid receivable.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_created", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Human-readable code (e.g., "V-000123")
    code = db.Column(db.String(32), nullable=False, unique=True)

    seller_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=True, index=True)

    total = db.Column(db.Numeric(12, 2), nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default=PAYMENT_CASH)
    is_credit = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.String(16), nullable=False, default=STATUS_COMPLETED, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    seller = db.relationship("User")
    customer = db.relationship("Customer", backref=db.backref("sales", lazy=True))
    items = db.relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
        lazy=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "seller_id": self.seller_id,
            "customer_id": self.customer_id,
            "total": format_money(self.total),
            "payment_method": self.payment_method,
            "is_credit": self.is_credit,
            "status": self.status,
            "created_at": to_utc_z(self.created_at),
        }


class SaleItem(db.Model):
    """Line on a sale. unit_price is a snapshot, independent of later price edits."""
    __tablename__ = "sale_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price = db.Column(db.Numeric(12, 2), nullable=False)
    subtotal = db.Column(db.Numeric(12, 2), nullable=False)

    sale = db.relationship("Sale", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": format_money(self.unit_price),
            "subtotal": format_money(self.subtotal),
        }
