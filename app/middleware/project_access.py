"""
Project Access Middleware: Verifies the caller may touch a project.

Provides two decorators keyed on a route parameter:

    @require_project_owner("project_id")   owner only (all writes)
    @require_project_reader("project_id")  owner or invited member (reads)

Usage:
    @bp.route("/projects/<int:project_id>/milestones")
    @require_user
    @require_project_owner("project_id")
    def list_milestones(project_id):
        ...

Both return 403 for a missing project as well as a foreign one.
"""

import functools
import logging

from flask import g, request

from app.services.project_service import can_read_project, verify_project_ownership
from app.utils.errors import E, api_error

logger = logging.getLogger(__name__)


def _project_id_from(param_name, kwargs):
    project_id = kwargs.get(param_name)
    if project_id is None:
        project_id = (request.view_args or {}).get(param_name)
    return project_id


def _guard(param_name, check, denial):
    def decorator(f):
        @functools.wraps(f)
        def decorated(*args, **kwargs):
            project_id = _project_id_from(param_name, kwargs)
            if project_id is None:
                return f(*args, **kwargs)

            if not check(project_id):
                logger.warning(
                    "Project access denied",
                    extra={"user_id": g.user_id, "project_id": project_id},
                )
                return api_error(E.FORBIDDEN, denial)

            return f(*args, **kwargs)
        return decorated
    return decorator


def require_project_owner(param_name: str = "project_id"):
    """Decorator: only the project's owner gets through."""
    return _guard(
        param_name,
        lambda pid: verify_project_ownership(g.user_id, pid),
        "Forbidden",
    )


def require_project_reader(param_name: str = "project_id"):
    """Decorator: owner or a member invited under the caller's email."""
    return _guard(
        param_name,
        lambda pid: can_read_project(g.user_id, getattr(g, "user_email", None), pid),
        "You do not have access to this project",
    )
