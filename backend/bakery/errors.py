"""
Service-layer error types.

Every error carries an HTTP-mappable status_code so routes can translate
it without knowing which service raised it. PersistenceError is the only
one whose message is not shown to the caller.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for business and input errors raised by services."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(ServiceError, ValueError):
    """400-level input problem."""


class ConflictError(ServiceError, ValueError):
    """409-level business rule conflict (e.g., duplicate product code)."""
    status_code = 409


class NotFoundError(ServiceError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id):
        super().__init__(f"Product not found: {product_id}", details={"product_id": product_id})
        self.product_id = product_id


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id):
        super().__init__(f"Customer not found: {customer_id}", details={"customer_id": customer_id})
        self.customer_id = customer_id


class InsufficientStockError(ServiceError):
    """Requested quantity exceeds the product's available stock."""

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {product_name}",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested_quantity": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.product_name = product_name


class PersistenceError(ServiceError):
    """Storage-layer fault. Full detail goes to the server log only."""
    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": "Internal server error"}
