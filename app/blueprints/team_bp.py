"""
Team Blueprint.

Endpoints:
    GET    /api/v1/projects/shared                    projects shared with the caller's email
    GET    /api/v1/projects/<pid>/team                owner or member
    POST   /api/v1/projects/<pid>/team                owner; body {invited_email}
    DELETE /api/v1/projects/<pid>/team/<member_id>    owner

Invites only grant read access. No email is sent.
"""

import logging

from flask import Blueprint, g, jsonify

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.middleware.project_access import require_project_owner, require_project_reader
from app.services import project_service
from app.utils.helpers import require_json

logger = logging.getLogger(__name__)

team_bp = register_error_handlers(Blueprint("team", __name__, url_prefix="/api/v1"))


@team_bp.route("/projects/shared", methods=["GET"])
@require_user
def list_shared_projects():
    return jsonify(project_service.list_shared_projects(g.user_email)), 200


@team_bp.route("/projects/<int:project_id>/team", methods=["GET"])
@require_user
@require_project_reader("project_id")
def list_members(project_id):
    return jsonify(project_service.list_members(project_id)), 200


@team_bp.route("/projects/<int:project_id>/team", methods=["POST"])
@require_user
@require_project_owner("project_id")
def invite_member(project_id):
    data = require_json()
    member = project_service.invite_member(project_id, data.get("invited_email") or data.get("email"))
    return jsonify(member), 201


@team_bp.route("/projects/<int:project_id>/team/<int:member_id>", methods=["DELETE"])
@require_user
@require_project_owner("project_id")
def remove_member(project_id, member_id):
    project_service.remove_member(project_id, member_id)
    return jsonify({"success": True}), 200
