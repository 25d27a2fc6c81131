"""
Activity Blueprint — dashboard event feed and metric cards.

  GET  /api/activities          — newest first, optional ?limit=
  POST /api/activities          — append an event
  GET  /api/dashboard/metrics   — metric cards for the caller's projects
"""

from flask import Blueprint, jsonify

from trackboard.blueprints import json_body, parse_limit
from trackboard.middleware.permission_required import current_caller, require_auth
from trackboard.services import activity_service, dashboard_service

activity_bp = Blueprint("activity", __name__, url_prefix="/api")


@activity_bp.route("/activities", methods=["GET"])
@require_auth
def list_activities():
    activities = activity_service.list_activities(limit=parse_limit())
    return jsonify([a.to_dict() for a in activities]), 200


@activity_bp.route("/activities", methods=["POST"])
@require_auth
def create_activity():
    """Body: { "type", "title", "user"?, "status"? }; ``user`` defaults to the caller."""
    data = json_body()
    caller = current_caller()
    activity = activity_service.record(
        data.get("type") or "",
        data.get("title") or "",
        data.get("user") or caller.username,
        data.get("status") or "",
    )
    return jsonify(activity.to_dict()), 201


@activity_bp.route("/dashboard/metrics", methods=["GET"])
@require_auth
def dashboard_metrics():
    return jsonify(dashboard_service.get_metrics(current_caller())), 200
