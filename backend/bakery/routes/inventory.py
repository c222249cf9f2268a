# Overview: Flask API routes for reading the inventory movement log.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..permissions import CAN_VIEW_INVENTORY
from ..services import inventory_service

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/movements")
@require_auth
@require_role(*CAN_VIEW_INVENTORY)
def list_movements_route():
    """
    Movement log newest first.

    Query params:
    - product_id: int (optional)
    - sale_id: int (optional)
    - limit: int (default 100, max 500)
    """
    limit = request.args.get("limit", default=100, type=int)
    limit = max(1, min(limit, 500))

    movements = inventory_service.list_movements(
        product_id=request.args.get("product_id", type=int),
        sale_id=request.args.get("sale_id", type=int),
        limit=limit,
    )
    return jsonify([m.to_dict() for m in movements]), 200
