# Overview: Fire-and-forget activity log; never fails the calling operation.

from __future__ import annotations

from flask import current_app, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import AuditLog, Sale

ACTION_SALE_CREATED = "SALE_CREATED"
ACTION_PRODUCT_CREATED = "PRODUCT_CREATED"
ACTION_PRODUCT_UPDATED = "PRODUCT_UPDATED"
ACTION_PRODUCT_DEACTIVATED = "PRODUCT_DEACTIVATED"
ACTION_STOCK_INCREASED = "PRODUCT_STOCK_INCREASED"
ACTION_FINANCE_RECORDED = "FINANCIAL_MOVEMENT_RECORDED"
ACTION_PERMISSION_DENIED = "PERMISSION_DENIED"
ACTION_LOGIN = "LOGIN"


def record(
    actor_id: int | None,
    action: str,
    detail: str = "",
    ip_address: str | None = None,
) -> AuditLog | None:
    """
    Append an audit entry in its own commit.

    Call this only when the session holds no pending business writes (after
    the business commit). A storage failure is rolled back and logged, and
    None is returned instead of raising.
    """
    if ip_address is None and has_request_context():
        ip_address = request.remote_addr

    entry = AuditLog(user_id=actor_id, action=action, details=detail, ip_address=ip_address)
    try:
        db.session.add(entry)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Failed to record audit entry %s for user %s", action, actor_id, exc_info=True)
        return None
    return entry


def sale_created_listener(sale: Sale, actor_id: int) -> None:
    """Post-commit listener for SalesService."""
    payment_mode = "CREDIT" if sale.is_credit else sale.payment_method
    record(
        actor_id,
        ACTION_SALE_CREATED,
        f"Sale {sale.code} (id={sale.id}) created by user {actor_id}, payment {payment_mode}",
    )


def list_entries(*, action: str | None = None, limit: int = 100) -> list[AuditLog]:
    query = db.session.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(limit).all()
