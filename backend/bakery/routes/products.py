# Overview: Flask API routes for the product catalog and stock replenishment.

# backend/bakery/routes/products.py
"""
Product management routes.

- Read operations: every role
- Catalog writes: ADMIN
- Stock replenishment: ADMIN, PRODUCTION
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import ServiceError, ValidationError
from ..models import Product
from ..permissions import CAN_MANAGE_CATALOG, CAN_REPLENISH_STOCK, CAN_VIEW_CATALOG
from ..services import audit_service, catalog_service
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_product,
    require_positive_int,
    validate_payload,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"code", "name", "description", "price", "stock", "is_active"},
    required_on_create={"code", "name", "price"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_role(*CAN_VIEW_CATALOG)
def list_products_route():
    """
    List products ordered by name.

    Query params:
    - include_inactive: "true" to include deactivated products (ADMIN only)
    """
    include_inactive = request.args.get("include_inactive", "").lower() == "true"
    if include_inactive and g.current_user.role not in CAN_MANAGE_CATALOG:
        include_inactive = False

    products = catalog_service.list_products(include_inactive=include_inactive)
    return jsonify([p.to_dict() for p in products]), 200


@products_bp.get("/<int:product_id>")
@require_auth
@require_role(*CAN_VIEW_CATALOG)
def get_product_route(product_id: int):
    try:
        return jsonify(catalog_service.get_product(product_id).to_dict()), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.get("/code/<string:code>")
@require_auth
@require_role(*CAN_VIEW_CATALOG)
def get_product_by_code_route(code: str):
    try:
        return jsonify(catalog_service.get_product_by_code(code).to_dict()), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.post("")
@require_auth
@require_role(*CAN_MANAGE_CATALOG)
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        product = catalog_service.create_product(patch=patch, actor_id=g.current_user.id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    audit_service.record(
        g.current_user.id,
        audit_service.ACTION_PRODUCT_CREATED,
        f"Product {product.id} ({product.code}) created by {g.current_user.email}",
    )
    return jsonify(product.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_role(*CAN_MANAGE_CATALOG)
def update_product_route(product_id: int):
    """Partial update: only the provided fields change."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        product = catalog_service.update_product(product_id, patch=patch, actor_id=g.current_user.id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    audit_service.record(
        g.current_user.id,
        audit_service.ACTION_PRODUCT_UPDATED,
        f"Product {product.id} updated by {g.current_user.email}: {', '.join(sorted(patch))}",
    )
    return jsonify(product.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_role(*CAN_MANAGE_CATALOG)
def deactivate_product_route(product_id: int):
    """Soft delete: the product stays referenced by past sales."""
    try:
        product = catalog_service.deactivate_product(product_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code

    audit_service.record(
        g.current_user.id,
        audit_service.ACTION_PRODUCT_DEACTIVATED,
        f"Product {product.id} deactivated by {g.current_user.email}",
    )
    return jsonify({"ok": True, "product": product.to_dict()}), 200


@products_bp.put("/<int:product_id>/stock")
@require_auth
@require_role(*CAN_REPLENISH_STOCK)
def add_stock_route(product_id: int):
    """
    Add produced or delivered units.

    Body: {"quantity": positive int, "reason"?: str}
    """
    payload = request.get_json(silent=True) or {}

    try:
        quantity = require_positive_int(payload.get("quantity"), "quantity")
        reason = str(payload.get("reason") or "Stock replenishment").strip()[:255]
        if not reason:
            raise ValidationError("reason cannot be blank")
        product = catalog_service.increment_stock(
            product_id,
            quantity,
            actor_id=g.current_user.id,
            reason=reason,
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to add stock to product %s", product_id)
        return jsonify({"error": "Internal server error"}), 500

    audit_service.record(
        g.current_user.id,
        audit_service.ACTION_STOCK_INCREASED,
        f"Stock of product {product.id} increased by {quantity} by {g.current_user.email}",
    )
    return jsonify({"id": product.id, "name": product.name, "stock": product.stock}), 200
