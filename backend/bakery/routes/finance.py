# Overview: Flask API routes for the cash-flow ledger.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import ServiceError
from ..permissions import CAN_RECORD_FINANCE
from ..services import audit_service, finance_service

finance_bp = Blueprint("finance", __name__, url_prefix="/api/finance")


@finance_bp.post("/movements")
@require_auth
@require_role(*CAN_RECORD_FINANCE)
def record_movement_route():
    """
    Record a manual income or expense.

    Body: {"movement_type": "INCOME"|"EXPENSE", "category", "amount", "description"?}
    """
    try:
        movement = finance_service.record_movement(
            request.get_json(silent=True) or {},
            actor_id=g.current_user.id,
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to record financial movement")
        return jsonify({"error": "Internal server error"}), 500

    audit_service.record(
        g.current_user.id,
        audit_service.ACTION_FINANCE_RECORDED,
        f"{movement.movement_type} {movement.id} - {movement.category}",
    )
    return jsonify({"ok": True, "movement": movement.to_dict()}), 201


@finance_bp.get("/movements")
@require_auth
def list_movements_route():
    limit = request.args.get("limit", type=int)
    if limit is not None:
        limit = max(1, min(limit, 500))

    movements = finance_service.list_movements(limit=limit)
    data = []
    for m in movements:
        item = m.to_dict()
        item["user"] = {"id": m.created_by.id, "name": m.created_by.name} if m.created_by else None
        data.append(item)
    return jsonify(data), 200
