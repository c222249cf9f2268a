# Overview: Flask API routes for staff account management (ADMIN only).

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth, require_role
from ..errors import ServiceError
from ..permissions import CAN_MANAGE_USERS
from ..services import auth_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_role(*CAN_MANAGE_USERS)
def list_users_route():
    return jsonify([u.to_dict() for u in auth_service.list_users()]), 200


@users_bp.post("")
@require_auth
@require_role(*CAN_MANAGE_USERS)
def create_user_route():
    """Body: {"name", "email", "password", "role", "phone"?}"""
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.create_user(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
            phone=data.get("phone"),
        )
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"ok": True, "user": user.to_dict()}), 201


@users_bp.put("/<int:user_id>")
@require_auth
@require_role(*CAN_MANAGE_USERS)
def update_user_route(user_id: int):
    try:
        user = auth_service.update_user(user_id, request.get_json(silent=True) or {})
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify(user.to_dict()), 200


@users_bp.delete("/<int:user_id>")
@require_auth
@require_role(*CAN_MANAGE_USERS)
def deactivate_user_route(user_id: int):
    """Deactivates the account and revokes its sessions."""
    try:
        user = auth_service.deactivate_user(user_id, actor_id=g.current_user.id)
    except ServiceError as e:
        return jsonify(e.to_dict()), e.status_code
    return jsonify({"ok": True, "user": user.to_dict()}), 200
