"""
Work Item Blueprint — work items of a project and their comments.

  GET    /api/projects/<project_id>/workitems
  POST   /api/projects/<project_id>/workitems
  PUT    /api/projects/<project_id>/workitems/<work_item_id>            — partial update
  DELETE /api/projects/<project_id>/workitems/<work_item_id>
  POST   /api/projects/<project_id>/workitems/<work_item_id>/comments
"""

from flask import Blueprint, jsonify

from trackboard.blueprints import json_body
from trackboard.middleware.permission_required import current_caller, require_auth
from trackboard.services import work_item_service

work_item_bp = Blueprint(
    "work_items", __name__, url_prefix="/api/projects/<project_id>/workitems"
)


@work_item_bp.route("", methods=["GET"])
@require_auth
def list_work_items(project_id):
    items = work_item_service.list_for_project(project_id, current_caller())
    return jsonify([i.to_dict() for i in items]), 200


@work_item_bp.route("", methods=["POST"])
@require_auth
def create_work_item(project_id):
    """Body: { "title", "description"?, "status"?, "assignedTo"? }"""
    data = json_body()
    item = work_item_service.create_work_item(project_id, data, current_caller())
    return jsonify(item.to_dict()), 201


@work_item_bp.route("/<work_item_id>", methods=["PUT"])
@require_auth
def update_work_item(project_id, work_item_id):
    """Only keys present in the body are changed; ``"assignedTo": null`` unassigns."""
    data = json_body()
    item = work_item_service.update_work_item(project_id, work_item_id, data, current_caller())
    return jsonify(item.to_dict()), 200


@work_item_bp.route("/<work_item_id>", methods=["DELETE"])
@require_auth
def delete_work_item(project_id, work_item_id):
    work_item_service.delete_work_item(project_id, work_item_id, current_caller())
    return jsonify({"message": "Work item deleted"}), 200


@work_item_bp.route("/<work_item_id>/comments", methods=["POST"])
@require_auth
def add_comment(project_id, work_item_id):
    """Body: { "content": "..." } (``text`` accepted as an alias)"""
    data = json_body()
    content = data.get("content", data.get("text"))
    item = work_item_service.add_comment(project_id, work_item_id, content, current_caller())
    return jsonify(item.to_dict()), 201
