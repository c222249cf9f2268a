# Overview: Customer records used by named and credit sales.

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..errors import ConflictError, CustomerNotFoundError
from ..models import Customer, Sale

CUSTOMER_MUTABLE_FIELDS = {"name", "email", "phone", "address"}


def list_customers() -> list[Customer]:
    return db.session.query(Customer).order_by(Customer.created_at.desc(), Customer.id.desc()).all()


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    return customer


def _ensure_email_available(email: str | None, exclude_id: int | None = None) -> None:
    if not email:
        return
    query = db.session.query(Customer.id).filter(Customer.email == email)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    if query.first() is not None:
        raise ConflictError("Email is already registered")


def _commit_or_conflict() -> None:
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Email is already registered")


def create_customer(*, patch: dict) -> Customer:
    _ensure_email_available(patch.get("email"))
    customer = Customer(**{k: v for k, v in patch.items() if k in CUSTOMER_MUTABLE_FIELDS})
    db.session.add(customer)
    _commit_or_conflict()
    return customer


def update_customer(customer_id: int, *, patch: dict) -> Customer:
    customer = get_customer(customer_id)
    if "email" in patch:
        _ensure_email_available(patch["email"], exclude_id=customer.id)
    for k, v in patch.items():
        if k in CUSTOMER_MUTABLE_FIELDS:
            setattr(customer, k, v)
    _commit_or_conflict()
    return customer


def delete_customer(customer_id: int) -> None:
    """
    Hard-delete a customer without sales history.

    Sales keep their customer reference, so customers with sales cannot go.
    """
    customer = get_customer(customer_id)
    sale_count = db.session.query(Sale.id).filter(Sale.customer_id == customer.id).count()
    if sale_count:
        raise ConflictError(
            "Customer has sales and cannot be deleted",
            details={"customer_id": customer.id, "sales": sale_count},
        )
    db.session.delete(customer)
    db.session.commit()
