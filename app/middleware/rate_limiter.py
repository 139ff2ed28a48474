"""
Rate limiting configuration.

The Limiter instance is created in app/__init__.py with no default limits;
this module attaches per-blueprint limits once blueprints are registered.

Usage:
    from app.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

from flask import g, request

logger = logging.getLogger(__name__)

AI_LIMIT = "10/minute"
WRITE_LIMIT = "60/minute"

WRITE_BLUEPRINTS = (
    "team",
    "stakeholder",
    "group",
    "milestone",
    "script",
    "chat",
    "followup",
)


def user_or_ip_key():
    """Limit per authenticated user, falling back to the remote address."""
    user_id = getattr(g, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return request.remote_addr or "unknown"


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

        - AI endpoints:     10/minute  (LLM calls are paid)
        - CRUD blueprints:  60/minute
        - Health check:     exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("ai")
    if bp:
        limiter.limit(AI_LIMIT, key_func=user_or_ip_key)(bp)

    for bp_name in WRITE_BLUEPRINTS:
        bp = app.blueprints.get(bp_name)
        if bp:
            limiter.limit(WRITE_LIMIT, key_func=user_or_ip_key)(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured: AI %s, CRUD %s", AI_LIMIT, WRITE_LIMIT)
