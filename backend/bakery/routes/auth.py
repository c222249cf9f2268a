# Overview: Flask API routes for login, logout and the current session.

# backend/bakery/routes/auth.py
"""
Authentication API routes

- Self-registration is disabled; admins create accounts (/api/users or CLI)
- Login returns an opaque bearer token for the Authorization header
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import bearer_token, require_auth
from ..services import audit_service, auth_service, session_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Self-registration is disabled for security.

    Users can only be created by administrators via:
    - POST /api/users (ADMIN role)
    - CLI: flask users create
    """
    return jsonify({
        "error": "Self-registration is disabled. Contact an administrator to create an account."
    }), 403


@auth_bp.post("/login")
def login_route():
    """
    Authenticate with email + password and create a session token.

    Returns user info and token on success.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400

    user = auth_service.authenticate(email, password)
    if not user:
        return jsonify({"error": "Invalid credentials"}), 401

    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    audit_service.record(user.id, audit_service.ACTION_LOGIN, f"Login by {user.email}")

    return jsonify({
        "ok": True,
        "token": token,
        "expires_at": session.to_dict()["expires_at"],
        "user": user.to_dict(),
    }), 200


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(bearer_token(), reason="Logout")
    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
