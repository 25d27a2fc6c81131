"""
User Blueprint — user administration and the invite activation step.

  POST   /api/users/set-password   — public; activate an invited account
  GET    /api/users                — admin: list all users
  POST   /api/users/invite         — admin: create an inactive account
  POST   /api/users                — admin: direct add
  PUT    /api/users/<user_id>      — admin: update username / email / role
  DELETE /api/users/<user_id>      — admin: remove an account
"""

from flask import Blueprint, jsonify

from trackboard.blueprints import json_body
from trackboard.middleware.permission_required import current_caller, require_roles
from trackboard.models.auth import ROLE_ADMIN, ROLE_USER
from trackboard.services import user_service

user_bp = Blueprint("users", __name__, url_prefix="/api/users")


@user_bp.route("/set-password", methods=["POST"])
def set_password():
    """
    Body: { "email": "...", "password": "..." }

    Only valid while the account has no password; this is not a reset.
    """
    data = json_body()
    user_service.set_password(data.get("email"), data.get("password"))
    return jsonify({"message": "Password set successfully"}), 200


@user_bp.route("", methods=["GET"])
@require_roles(ROLE_ADMIN)
def list_users():
    users = user_service.list_users()
    return jsonify([u.to_dict() for u in users]), 200


@user_bp.route("/invite", methods=["POST"])
@require_roles(ROLE_ADMIN)
def invite_user():
    """Body: { "email": "...", "username": "..."?, "role": "..."? }"""
    data = json_body()
    user = user_service.invite_user(
        data.get("email"),
        username=data.get("username"),
        role=data.get("role") or ROLE_USER,
    )
    return jsonify(user.to_dict()), 201


@user_bp.route("", methods=["POST"])
@require_roles(ROLE_ADMIN)
def create_user():
    """Body: { "username", "email", "password"?, "role"? }"""
    data = json_body()
    user = user_service.create_user(
        data.get("username"),
        data.get("email"),
        password=data.get("password"),
        role=data.get("role") or ROLE_USER,
    )
    return jsonify(user.to_dict()), 201


@user_bp.route("/<user_id>", methods=["PUT"])
@require_roles(ROLE_ADMIN)
def update_user(user_id):
    data = json_body()
    user = user_service.update_user(user_id, data)
    return jsonify(user.to_dict()), 200


@user_bp.route("/<user_id>", methods=["DELETE"])
@require_roles(ROLE_ADMIN)
def delete_user(user_id):
    user_service.delete_user(user_id, current_caller())
    return jsonify({"message": "User removed"}), 200
