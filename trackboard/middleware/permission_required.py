"""
Route decorators — authentication and role gates.

Usage:
    @bp.route("/api/projects", methods=["GET"])
    @require_auth
    def list_projects():
        caller = current_caller()
        ...

    @bp.route("/api/users", methods=["GET"])
    @require_roles(ROLE_ADMIN)
    def list_users():
        ...

Project-level checks (membership, creator) are not decorators: they need
the loaded project and live in ``permission_service``.
"""

import functools
import logging

from flask import g

from trackboard.core.caller import Caller
from trackboard.core.exceptions import AuthenticationError, PermissionDenied
from trackboard.middleware.jwt_auth import NO_TOKEN
from trackboard.services.permission_service import authorize

logger = logging.getLogger(__name__)


def current_caller() -> Caller:
    """The verified caller of the current request.

    Raises AuthenticationError when the request carries no valid token.
    """
    caller = getattr(g, "caller", None)
    if caller is None:
        raise AuthenticationError(getattr(g, "auth_error", None) or NO_TOKEN)
    return caller


def require_auth(f):
    """Decorator: reject the request with 401 unless a valid token is present."""
    @functools.wraps(f)
    def decorated(*args, **kwargs):
        current_caller()
        return f(*args, **kwargs)
    return decorated


def require_roles(*roles: str):
    """
    Decorator: require an authenticated caller holding one of ``roles``.

    401 without a valid token, 403 for any other role.
    """
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            caller = current_caller()
            try:
                authorize(roles, caller.role)
            except PermissionDenied:
                logger.warning(
                    "User %s (role=%s) denied: requires %s on %s",
                    caller.id, caller.role, roles, f.__name__,
                )
                raise
            return f(*args, **kwargs)
        return decorated
    return decorator
