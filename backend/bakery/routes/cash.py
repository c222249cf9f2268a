# Overview: Flask API route for the daily cash summary.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import ServiceError
from ..permissions import ALL_ROLES
from ..services import report_service

cash_bp = Blueprint("cash", __name__, url_prefix="/api/cash")


@cash_bp.get("/summary")
@require_auth
@require_role(*ALL_ROLES)
def cash_summary_route():
    """
    Query params:
    - date: YYYY-MM-DD (UTC day, defaults to today)
    """
    try:
        return jsonify(report_service.cash_summary(request.args.get("date"))), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
