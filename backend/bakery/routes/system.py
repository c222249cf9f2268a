# Overview: Flask API routes for health checks and the audit log.

from flask import Blueprint, jsonify, request
from sqlalchemy import text

from ..decorators import require_auth, require_role
from ..extensions import db
from ..permissions import ROLE_ADMIN
from ..services import audit_service

system_bp = Blueprint("system", __name__)


@system_bp.get("/")
def index():
    return jsonify({"ok": True, "msg": "Bakery POS API running"}), 200


@system_bp.get("/api/health")
def health():
    db.session.execute(text("SELECT 1"))
    return jsonify({"ok": True, "database": "up"}), 200


@system_bp.get("/api/audit-logs")
@require_auth
@require_role(ROLE_ADMIN)
def list_audit_logs():
    """
    Query params:
    - action: filter by action code (e.g., SALE_CREATED)
    - limit: int (default 100, max 500)
    """
    limit = request.args.get("limit", default=100, type=int)
    limit = max(1, min(limit, 500))
    entries = audit_service.list_entries(action=request.args.get("action"), limit=limit)
    return jsonify([e.to_dict() for e in entries]), 200
