"""
Auth Blueprint — account registration and bearer-token login.

  POST /api/auth/signup   — create an account (first account becomes admin)
  POST /api/auth/login    — email + password → token, or password-setup prompt
  GET  /api/auth/me       — current user profile
"""

from flask import Blueprint, jsonify

from trackboard.blueprints import json_body
from trackboard.middleware.permission_required import current_caller, require_auth
from trackboard.services import user_service

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


# ═══════════════════════════════════════════════════════════════
# POST /api/auth/signup
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/signup", methods=["POST"])
def signup():
    """
    Body: { "username": "...", "email": "...", "password": "..." }

    A ``role`` in the body is ignored.
    """
    data = json_body()
    user_service.signup(data.get("username"), data.get("email"), data.get("password"))
    return jsonify({"message": "User created"}), 201


# ═══════════════════════════════════════════════════════════════
# POST /api/auth/login
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Body: { "email": "...", "password": "..." }

    Invited accounts answer 200 with ``passwordSetupRequired`` and no token.
    """
    data = json_body()
    result = user_service.login(data.get("email"), data.get("password"))

    if result.setup_required:
        return jsonify({
            "passwordSetupRequired": True,
            "email": result.user.email,
        }), 200

    return jsonify({**result.token, "user": result.user.to_dict()}), 200


# ═══════════════════════════════════════════════════════════════
# GET /api/auth/me
# ═══════════════════════════════════════════════════════════════
@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    user = user_service.get_user_or_404(current_caller().id)
    return jsonify(user.to_dict()), 200
