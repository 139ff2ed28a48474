"""
Stakeholder Blueprint.

Endpoints:
    DIRECTORY   /api/v1/global-stakeholders                       GET, POST
                /api/v1/global-stakeholders/<id>                  PATCH, DELETE (?force=true)

    PROJECT     /api/v1/projects/<pid>/stakeholders               GET, POST
                /api/v1/project-stakeholders/<id>                 PATCH, DELETE
                /api/v1/project-stakeholders/<id>/history         GET (?limit=)
                /api/v1/project-stakeholders/<id>/adkar           GET
"""

import logging

from flask import Blueprint, g, jsonify, request

from app.blueprints import register_error_handlers
from app.core.exceptions import AccessDeniedError, NotFoundError
from app.middleware.jwt_auth import require_user
from app.middleware.project_access import require_project_owner, require_project_reader
from app.models import db
from app.models.stakeholder import ProjectStakeholder
from app.services import project_service, stakeholder_service
from app.utils.helpers import parse_int, require_json

logger = logging.getLogger(__name__)

stakeholder_bp = register_error_handlers(Blueprint("stakeholder", __name__, url_prefix="/api/v1"))


def _readable_link(link_id: int) -> ProjectStakeholder:
    link = db.session.get(ProjectStakeholder, link_id)
    if link is None:
        raise NotFoundError(resource="Stakeholder", resource_id=link_id)
    if not project_service.can_read_project(g.user_id, g.user_email, link.project_id):
        raise AccessDeniedError("You do not have access to this project")
    return link


# ═════════════════════════════════════════════════════════════════════════
# Directory
# ═════════════════════════════════════════════════════════════════════════


@stakeholder_bp.route("/global-stakeholders", methods=["GET"])
@require_user
def list_global_stakeholders():
    group_id = request.args.get("group_id", type=int)
    return jsonify(stakeholder_service.list_global_stakeholders(g.user_id, group_id)), 200


@stakeholder_bp.route("/global-stakeholders", methods=["POST"])
@require_user
def create_global_stakeholder():
    person = stakeholder_service.create_global_stakeholder(g.user_id, require_json())
    return jsonify(person), 201


@stakeholder_bp.route("/global-stakeholders/<int:stakeholder_id>", methods=["PATCH"])
@require_user
def update_global_stakeholder(stakeholder_id):
    person = stakeholder_service.update_global_stakeholder(g.user_id, stakeholder_id, require_json())
    return jsonify(person), 200


@stakeholder_bp.route("/global-stakeholders/<int:stakeholder_id>", methods=["DELETE"])
@require_user
def delete_global_stakeholder(stakeholder_id):
    force = request.args.get("force", "").lower() == "true"
    stakeholder_service.delete_global_stakeholder(g.user_id, stakeholder_id, force=force)
    return jsonify({"success": True}), 200


# ═════════════════════════════════════════════════════════════════════════
# Project stakeholders
# ═════════════════════════════════════════════════════════════════════════


@stakeholder_bp.route("/projects/<int:project_id>/stakeholders", methods=["GET"])
@require_user
@require_project_reader("project_id")
def list_project_stakeholders(project_id):
    return jsonify(stakeholder_service.list_project_stakeholders(project_id)), 200


@stakeholder_bp.route("/projects/<int:project_id>/stakeholders", methods=["POST"])
@require_user
@require_project_owner("project_id")
def add_project_stakeholder(project_id):
    """Body: {stakeholder_id} to link an existing person, or {name, role?, email?, phone?, department?}."""
    link = stakeholder_service.add_project_stakeholder(project_id, require_json())
    return jsonify(link), 201


@stakeholder_bp.route("/project-stakeholders/<int:link_id>", methods=["PATCH"])
@require_user
def update_project_stakeholder(link_id):
    link = stakeholder_service.get_project_stakeholder(g.user_id, link_id)
    return jsonify(stakeholder_service.update_project_stakeholder(link, require_json())), 200


@stakeholder_bp.route("/project-stakeholders/<int:link_id>", methods=["DELETE"])
@require_user
def remove_project_stakeholder(link_id):
    link = stakeholder_service.get_project_stakeholder(g.user_id, link_id)
    stakeholder_service.remove_project_stakeholder(link)
    return jsonify({"success": True}), 200


@stakeholder_bp.route("/project-stakeholders/<int:link_id>/history", methods=["GET"])
@require_user
def list_score_history(link_id):
    link = _readable_link(link_id)
    limit = min(max(parse_int(request.args.get("limit"), 100), 1), 500)
    return jsonify(stakeholder_service.list_score_history(link.id, limit)), 200


@stakeholder_bp.route("/project-stakeholders/<int:link_id>/adkar", methods=["GET"])
@require_user
def get_adkar_summary(link_id):
    link = _readable_link(link_id)
    return jsonify(stakeholder_service.get_adkar_summary(link)), 200
