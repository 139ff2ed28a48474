"""
JWT Auth Middleware: Parses the hosted auth provider's bearer token, sets g.user_*.

Sign-in, sign-up and refresh all happen at the hosted provider. This app only
verifies the access token it issues (HS256, shared secret, fixed audience):

  Authorization: Bearer <token>  →  g.user_id (``sub``), g.user_email (``email``)

A missing, expired or tampered token leaves both unset; ``require_user``
then turns that into a 401.
"""

import functools
import logging

import jwt as pyjwt
from flask import current_app, g, request

from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that skip JWT auth entirely
JWT_SKIP_PREFIXES = (
    "/api/v1/health",
    "/static/",
)


def decode_access_token(token: str) -> dict:
    """Verify and decode an access token.

    Raises:
        jwt.InvalidTokenError (or a subclass such as ExpiredSignatureError).
    """
    return pyjwt.decode(
        token,
        current_app.config["AUTH_JWT_SECRET"],
        algorithms=["HS256"],
        audience=current_app.config.get("AUTH_JWT_AUDIENCE"),
    )


def init_jwt_middleware(app):
    """Register JWT middleware as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.user_id = None
        g.user_email = None

        path = request.path
        if not path.startswith("/api/v1/"):
            return
        for prefix in JWT_SKIP_PREFIXES:
            if path.startswith(prefix):
                return

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return

        token = auth_header[7:]  # Strip "Bearer "

        try:
            payload = decode_access_token(token)
        except pyjwt.ExpiredSignatureError:
            logger.info("Expired access token on %s", path)
            return
        except pyjwt.InvalidTokenError as exc:
            logger.info("Rejected access token on %s: %s", path, exc)
            return

        g.user_id = payload.get("sub")
        g.user_email = (payload.get("email") or "").lower() or None


def require_user(f):
    """Decorator: 401 unless the request carried a valid access token."""

    @functools.wraps(f)
    def decorated(*args, **kwargs):
        if not getattr(g, "user_id", None):
            return api_error(E.UNAUTHORIZED, "Unauthorized")
        return f(*args, **kwargs)

    return decorated
