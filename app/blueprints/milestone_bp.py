"""
Milestone Blueprint.

Endpoints:
    /api/v1/projects/<pid>/milestones     GET (reader), POST (owner)
    /api/v1/milestones/<id>               PATCH, DELETE (owner of the milestone's project)
"""

from flask import Blueprint, g, jsonify

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.middleware.project_access import require_project_owner, require_project_reader
from app.services import milestone_service
from app.utils.helpers import require_json

milestone_bp = register_error_handlers(Blueprint("milestone", __name__, url_prefix="/api/v1"))


@milestone_bp.route("/projects/<int:project_id>/milestones", methods=["GET"])
@require_user
@require_project_reader("project_id")
def list_milestones(project_id):
    return jsonify(milestone_service.list_milestones(project_id)), 200


@milestone_bp.route("/projects/<int:project_id>/milestones", methods=["POST"])
@require_user
@require_project_owner("project_id")
def create_milestone(project_id):
    """Body: {name, date, type, status?, description?, meeting_notes?}."""
    return jsonify(milestone_service.create_milestone(project_id, require_json())), 201


@milestone_bp.route("/milestones/<int:milestone_id>", methods=["PATCH"])
@require_user
def update_milestone(milestone_id):
    milestone = milestone_service.get_milestone(g.user_id, milestone_id)
    return jsonify(milestone_service.update_milestone(milestone, require_json())), 200


@milestone_bp.route("/milestones/<int:milestone_id>", methods=["DELETE"])
@require_user
def delete_milestone(milestone_id):
    milestone = milestone_service.get_milestone(g.user_id, milestone_id)
    milestone_service.delete_milestone(milestone)
    return jsonify({"success": True}), 200
