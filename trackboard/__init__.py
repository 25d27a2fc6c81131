"""
TrackBoard — project and work-item tracking API.
Flask Application Factory.

Usage:
    from trackboard import create_app
    app = create_app()           # defaults to APP_ENV, else "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from trackboard.config import config
from trackboard.models import db
from trackboard.middleware.jwt_auth import init_jwt_middleware
from trackboard.middleware.logging_config import configure_logging
from trackboard.middleware.rate_limiter import init_rate_limits
from trackboard.middleware.security_headers import init_security_headers
from trackboard.middleware.timing import init_request_timing

logger = logging.getLogger(__name__)


# ── SQLite FK enforcement (global engine event) ─────────────────────────
@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],  # applied per blueprint in init_rate_limits
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: One of "development", "testing", "production".
                     Defaults to the APP_ENV env var, or "development".

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Middleware ───────────────────────────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_jwt_middleware(app)

    # ── Import all models so Alembic and create_all see them ─────────────
    from trackboard.models import activity as _activity_models  # noqa: F401
    from trackboard.models import auth as _auth_models          # noqa: F401
    from trackboard.models import project as _project_models    # noqa: F401
    from trackboard.models import work_item as _work_item_models  # noqa: F401

    # ── Create tables (CREATE IF NOT EXISTS; migrations own schema changes) ──
    db_uri = app.config["SQLALCHEMY_DATABASE_URI"]
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        os.makedirs(app.instance_path, exist_ok=True)
    with app.app_context():
        db.create_all()

    # ── Blueprints ───────────────────────────────────────────────────────
    from trackboard.blueprints import register_error_handlers
    from trackboard.blueprints.activity_bp import activity_bp
    from trackboard.blueprints.auth_bp import auth_bp
    from trackboard.blueprints.health_bp import health_bp
    from trackboard.blueprints.project_bp import project_bp
    from trackboard.blueprints.user_bp import user_bp
    from trackboard.blueprints.work_item_bp import work_item_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(project_bp)
    app.register_blueprint(work_item_bp)
    app.register_blueprint(activity_bp)
    app.register_blueprint(health_bp)

    register_error_handlers(app)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    logger.debug("TrackBoard app created (config=%s)", config_name)
    return app
