"""
Health check blueprint.

Endpoints:
    GET /api/health  — liveness plus a database round trip
"""

import logging
import time

from flask import Blueprint, jsonify
from sqlalchemy.exc import SQLAlchemyError

from trackboard.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/health")


@health_bp.route("", methods=["GET"])
def health():
    checks = {}
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        checks["database"] = {
            "status": "ok",
            "latency_ms": round((time.perf_counter() - t0) * 1000, 1),
        }
        status_code = 200
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.error("Health check — database failed: %s", exc)
        checks["database"] = {"status": "error"}
        status_code = 503

    return jsonify({
        "status": "ok" if status_code == 200 else "degraded",
        "app": "TrackBoard",
        "checks": checks,
    }), status_code
