"""
Project Blueprint — projects visible to the caller and their membership.

  GET    /api/projects                                  — caller's projects
  POST   /api/projects                                  — create a project
  POST   /api/projects/<project_id>/members             — add member by email
  DELETE /api/projects/<project_id>/members/<member_id> — remove member
"""

from flask import Blueprint, jsonify

from trackboard.blueprints import json_body
from trackboard.middleware.permission_required import current_caller, require_auth
from trackboard.services import project_service

project_bp = Blueprint("projects", __name__, url_prefix="/api/projects")


@project_bp.route("", methods=["GET"])
@require_auth
def list_projects():
    projects = project_service.list_my_projects(current_caller())
    return jsonify([p.to_dict() for p in projects]), 200


@project_bp.route("", methods=["POST"])
@require_auth
def create_project():
    """Body: { "name": "...", "description": "..."? }"""
    data = json_body()
    project = project_service.create_project(
        data.get("name"), data.get("description"), current_caller()
    )
    return jsonify(project.to_dict()), 201


@project_bp.route("/<project_id>/members", methods=["POST"])
@require_auth
def add_member(project_id):
    """Body: { "email": "..." }"""
    data = json_body()
    project = project_service.add_member(project_id, data.get("email"), current_caller())
    return jsonify(project.to_dict()), 200


@project_bp.route("/<project_id>/members/<member_id>", methods=["DELETE"])
@require_auth
def remove_member(project_id, member_id):
    project = project_service.remove_member(project_id, member_id, current_caller())
    return jsonify(project.to_dict()), 200
