"""
Follow-up Blueprint.

Endpoints:
    /api/v1/followups          GET (?project_id=&stakeholder_id=&upcoming=true), POST
    /api/v1/followups/<id>     PATCH, DELETE
"""

from flask import Blueprint, g, jsonify, request

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.services import followup_service
from app.utils.helpers import require_json

followup_bp = register_error_handlers(Blueprint("followup", __name__, url_prefix="/api/v1"))


@followup_bp.route("/followups", methods=["GET"])
@require_user
def list_followups():
    followups = followup_service.list_followups(
        g.user_id,
        project_id=request.args.get("project_id", type=int),
        stakeholder_id=request.args.get("stakeholder_id", type=int),
        upcoming=request.args.get("upcoming", "").lower() == "true",
    )
    return jsonify(followups), 200


@followup_bp.route("/followups", methods=["POST"])
@require_user
def create_followup():
    """Body: {project_id, scheduled_date, title, stakeholder_id?, notes?}."""
    return jsonify(followup_service.create_followup(g.user_id, require_json())), 201


@followup_bp.route("/followups/<int:followup_id>", methods=["PATCH"])
@require_user
def update_followup(followup_id):
    return jsonify(followup_service.update_followup(g.user_id, followup_id, require_json())), 200


@followup_bp.route("/followups/<int:followup_id>", methods=["DELETE"])
@require_user
def delete_followup(followup_id):
    followup_service.delete_followup(g.user_id, followup_id)
    return jsonify({"success": True}), 200
