"""
Chat History Blueprint.

Endpoints:
    /api/v1/chat-messages          GET (?project_id=&limit=), POST, DELETE (?project_id=)
    /api/v1/chat-insights          GET (?project_id=&stakeholder_id=&limit=), POST
    /api/v1/chat-insights/<id>     DELETE
"""

from flask import Blueprint, g, jsonify, request

from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.services import chat_service
from app.utils.helpers import parse_int, require_json

chat_bp = register_error_handlers(Blueprint("chat", __name__, url_prefix="/api/v1"))


def _limit(default: int) -> int:
    return min(max(parse_int(request.args.get("limit"), default), 1), 500)


@chat_bp.route("/chat-messages", methods=["GET"])
@require_user
def list_messages():
    messages = chat_service.list_messages(
        g.user_id,
        request.args.get("project_id", type=int),
        limit=_limit(chat_service.DEFAULT_MESSAGE_LIMIT),
    )
    return jsonify(messages), 200


@chat_bp.route("/chat-messages", methods=["POST"])
@require_user
def save_message():
    return jsonify(chat_service.save_message(g.user_id, require_json())), 201


@chat_bp.route("/chat-messages", methods=["DELETE"])
@require_user
def clear_messages():
    deleted = chat_service.clear_messages(g.user_id, request.args.get("project_id", type=int))
    return jsonify({"success": True, "deleted": deleted}), 200


@chat_bp.route("/chat-insights", methods=["GET"])
@require_user
def list_insights():
    insights = chat_service.list_insights(
        g.user_id,
        project_id=request.args.get("project_id", type=int),
        stakeholder_id=request.args.get("stakeholder_id", type=int),
        limit=_limit(chat_service.DEFAULT_INSIGHT_LIMIT),
    )
    return jsonify(insights), 200


@chat_bp.route("/chat-insights", methods=["POST"])
@require_user
def save_insight():
    return jsonify(chat_service.save_insight(g.user_id, require_json())), 201


@chat_bp.route("/chat-insights/<int:insight_id>", methods=["DELETE"])
@require_user
def delete_insight(insight_id):
    chat_service.delete_insight(g.user_id, insight_id)
    return jsonify({"success": True}), 200
