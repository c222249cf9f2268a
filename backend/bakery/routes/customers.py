# Overview: Flask API routes for customer records.

from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import ServiceError
from ..models import Customer
from ..permissions import CAN_MANAGE_CUSTOMERS
from ..services import customer_service
from ..validation import ModelValidationPolicy, validate_payload

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "email", "phone", "address"},
    required_on_create={"name"},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_role(*CAN_MANAGE_CUSTOMERS)
def list_customers_route():
    return jsonify([c.to_dict() for c in customer_service.list_customers()]), 200


@customers_bp.post("")
@require_auth
@require_role(*CAN_MANAGE_CUSTOMERS)
def create_customer_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
        customer = customer_service.create_customer(patch=patch)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500
    return jsonify(customer.to_dict()), 201


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_role(*CAN_MANAGE_CUSTOMERS)
def get_customer_route(customer_id: int):
    try:
        return jsonify(customer_service.get_customer(customer_id).to_dict()), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code


@customers_bp.put("/<int:customer_id>")
@require_auth
@require_role(*CAN_MANAGE_CUSTOMERS)
def update_customer_route(customer_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        customer = customer_service.update_customer(customer_id, patch=patch)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(customer.to_dict()), 200


@customers_bp.delete("/<int:customer_id>")
@require_auth
@require_role(*CAN_MANAGE_CUSTOMERS)
def delete_customer_route(customer_id: int):
    try:
        customer_service.delete_customer(customer_id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"ok": True}), 200
