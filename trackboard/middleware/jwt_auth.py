"""
JWT Auth Middleware — parses the bearer token, sets g.caller.

The hook never blocks a request. It records either a verified ``Caller``
(valid signature and expiry, account still present) or the reason there
is none; ``require_auth`` (permission_required.py)
turns a missing caller into a 401 on protected routes only.

    g.caller       Caller | None
    g.auth_error   None | "No token provided" | "Invalid or expired token"
"""

import logging

import jwt as pyjwt
from flask import g, request

from trackboard.core.caller import Caller
from trackboard.models import db
from trackboard.models.auth import User
from trackboard.services.jwt_service import decode_access_token

logger = logging.getLogger(__name__)

NO_TOKEN = "No token provided"
INVALID_TOKEN = "Invalid or expired token"

# Public endpoints; no token is parsed for these
JWT_SKIP_PREFIXES = (
    "/api/auth/signup",
    "/api/auth/login",
    "/api/users/set-password",
    "/api/health",
)


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.caller = None
        g.auth_error = NO_TOKEN

        path = request.path
        if not path.startswith("/api/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:].strip()
        if not token:
            return

        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            logger.debug("Expired token on %s", path)
            g.auth_error = INVALID_TOKEN
            return
        except pyjwt.InvalidTokenError as e:
            logger.debug("Invalid token on %s: %s", path, e)
            g.auth_error = INVALID_TOKEN
            return

        if db.session.get(User, payload["sub"]) is None:
            logger.info("Token for removed account %s on %s", payload["sub"], path)
            g.auth_error = INVALID_TOKEN
            return

        g.caller = Caller.from_claims(payload)
        g.auth_error = None
