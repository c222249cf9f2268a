# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/bakery/routes/sales.py
"""Sales API routes with role enforcement"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import PersistenceError, ServiceError
from ..permissions import CAN_SELL
from ..services.sale_query_service import get_sale_query_service
from ..services.sales_service import get_sales_service, parse_sale_request

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
@require_auth
@require_role(*CAN_SELL)
def create_sale_route():
    """
    Create a completed sale: items, stock decrement, inventory and cash movements.

    Body: {"customer_id"?, "items": [{"product_id", "quantity", "unit_price"?}],
           "payment_method"?, "is_credit"?}
    Available to: ADMIN, SELLER
    """
    try:
        sale_request = parse_sale_request(request.get_json(silent=True))
        sale = get_sales_service().create_sale(g.current_user.id, sale_request)
        return jsonify({"ok": True, "sale": sale.to_dict()}), 201

    except PersistenceError as e:
        # Already logged with the underlying database error
        return jsonify(e.to_dict()), 500
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create sale")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("")
@require_auth
@require_role(*CAN_SELL)
def list_sales_route():
    """
    List sales newest first with items, customer and seller.

    Query params:
    - limit: int (optional, max 500)
    - offset: int (optional)
    """
    limit = request.args.get("limit", type=int)
    offset = request.args.get("offset", type=int)
    if limit is not None:
        limit = max(1, min(limit, 500))
    if offset is not None:
        offset = max(0, offset)

    sales = get_sale_query_service().list_sales(limit=limit, offset=offset)
    return jsonify(sales), 200


@sales_bp.get("/<int:sale_id>")
@require_auth
@require_role(*CAN_SELL)
def get_sale_route(sale_id: int):
    try:
        return jsonify(get_sale_query_service().get_sale(sale_id)), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
