"""
Group Blueprint.

Endpoints:
    /api/v1/groups                        GET, POST (optional project_id links it)
    /api/v1/groups/<id>                   PATCH, DELETE
    /api/v1/projects/<pid>/groups         GET, POST {group_id}
    /api/v1/project-groups/<id>           PATCH, DELETE
"""

import logging

from flask import Blueprint, g, jsonify

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.middleware.project_access import require_project_owner, require_project_reader
from app.services import group_service
from app.utils.helpers import require_json

logger = logging.getLogger(__name__)

group_bp = register_error_handlers(Blueprint("group", __name__, url_prefix="/api/v1"))


@group_bp.route("/groups", methods=["GET"])
@require_user
def list_groups():
    return jsonify(group_service.list_groups(g.user_id)), 200


@group_bp.route("/groups", methods=["POST"])
@require_user
def create_group():
    return jsonify(group_service.create_group(g.user_id, require_json())), 201


@group_bp.route("/groups/<int:group_id>", methods=["PATCH"])
@require_user
def update_group(group_id):
    return jsonify(group_service.update_group(g.user_id, group_id, require_json())), 200


@group_bp.route("/groups/<int:group_id>", methods=["DELETE"])
@require_user
def delete_group(group_id):
    group_service.delete_group(g.user_id, group_id)
    return jsonify({"success": True}), 200


@group_bp.route("/projects/<int:project_id>/groups", methods=["GET"])
@require_user
@require_project_reader("project_id")
def list_project_groups(project_id):
    return jsonify(group_service.list_project_groups(project_id)), 200


@group_bp.route("/projects/<int:project_id>/groups", methods=["POST"])
@require_user
@require_project_owner("project_id")
def link_group(project_id):
    data = require_json()
    return jsonify(group_service.link_group(g.user_id, project_id, data.get("group_id"))), 201


@group_bp.route("/project-groups/<int:link_id>", methods=["PATCH"])
@require_user
def update_project_group(link_id):
    link = group_service.get_project_group(g.user_id, link_id)
    return jsonify(group_service.update_project_group(link, require_json())), 200


@group_bp.route("/project-groups/<int:link_id>", methods=["DELETE"])
@require_user
def unlink_group(link_id):
    link = group_service.get_project_group(g.user_id, link_id)
    group_service.unlink_group(link)
    return jsonify({"success": True}), 200
