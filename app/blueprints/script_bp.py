"""
Script Library Blueprint.

Endpoints:
    /api/v1/scripts                  GET (?project_id=&tag=&stakeholder_type=), POST
    /api/v1/scripts/<id>             PATCH, DELETE
    /api/v1/scripts/<id>/use         POST  increments times_used
    /api/v1/scripts/from-starter     POST  save a parsed conversation starter
"""

from flask import Blueprint, g, jsonify, request

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.services import script_service
from app.utils.helpers import require_json

script_bp = register_error_handlers(Blueprint("script", __name__, url_prefix="/api/v1"))


@script_bp.route("/scripts", methods=["GET"])
@require_user
def list_scripts():
    scripts = script_service.list_scripts(
        g.user_id,
        project_id=request.args.get("project_id", type=int),
        tag=request.args.get("tag") or None,
        stakeholder_type=request.args.get("stakeholder_type") or None,
    )
    return jsonify(scripts), 200


@script_bp.route("/scripts", methods=["POST"])
@require_user
def create_script():
    return jsonify(script_service.create_script(g.user_id, require_json())), 201


@script_bp.route("/scripts/from-starter", methods=["POST"])
@require_user
def save_from_starter():
    """Body: {phrase, stakeholder_name, tag?, suggestedTag?, stakeholder_type?, project_id?}."""
    return jsonify(script_service.save_from_starter(g.user_id, require_json())), 201


@script_bp.route("/scripts/<int:script_id>", methods=["PATCH"])
@require_user
def update_script(script_id):
    return jsonify(script_service.update_script(g.user_id, script_id, require_json())), 200


@script_bp.route("/scripts/<int:script_id>/use", methods=["POST"])
@require_user
def use_script(script_id):
    return jsonify(script_service.increment_usage(g.user_id, script_id)), 200


@script_bp.route("/scripts/<int:script_id>", methods=["DELETE"])
@require_user
def delete_script(script_id):
    script_service.delete_script(g.user_id, script_id)
    return jsonify({"success": True}), 200
