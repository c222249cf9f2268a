# Overview: Flask API route for the general sales and finance report.

from flask import Blueprint, jsonify, request

from ..decorators import require_auth
from ..errors import ServiceError
from ..services import report_service

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
@require_auth
def general_summary_route():
    """
    Query params:
    - date: YYYY-MM-DD, single-day report (default today)
    - start_date / end_date: YYYY-MM-DD inclusive range, overrides date
    """
    start_day = request.args.get("start_date") or request.args.get("date")
    end_day = request.args.get("end_date")
    try:
        return jsonify(report_service.general_summary(start_day, end_day)), 200
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
