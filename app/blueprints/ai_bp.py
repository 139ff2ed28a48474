"""
Ship or Sink: Change
AI Blueprint.

Endpoints:
    STARTERS   /api/v1/ai/conversation-starters    POST {project_stakeholder_id}
    CHAT       /api/v1/ai/chat                     POST {question, project_id?}

Both return the assistant's result dict; a failed LLM call yields 422 with
a generic error string.
"""

import logging

from flask import Blueprint, current_app, g, jsonify

from app.ai.assistants import ChatAssistant, ConversationStarterAssistant
from app.ai.gateway import LLMGateway
from app.blueprints import register_error_handlers
from app.middleware.jwt_auth import require_user
from app.services import stakeholder_service
from app.services.project_service import ensure_owner
from app.utils.errors import E, api_error
from app.utils.helpers import parse_int, require_json

logger = logging.getLogger(__name__)

ai_bp = register_error_handlers(Blueprint("ai", __name__, url_prefix="/api/v1/ai"))


# ── Lazy singletons stored on Flask app (test-isolation safe) ───────────────

def _get_gateway():
    if not hasattr(current_app, "_ai_gateway"):
        current_app._ai_gateway = LLMGateway(default_model=current_app.config["LLM_DEFAULT_CHAT_MODEL"])
    return current_app._ai_gateway


def _get_starter_assistant():
    if not hasattr(current_app, "_ai_starters"):
        current_app._ai_starters = ConversationStarterAssistant(gateway=_get_gateway())
    return current_app._ai_starters


def _get_chat_assistant():
    if not hasattr(current_app, "_ai_chat"):
        current_app._ai_chat = ChatAssistant(
            gateway=_get_gateway(),
            history_limit=current_app.config.get("AI_CHAT_HISTORY_LIMIT", 20),
        )
    return current_app._ai_chat


# ══════════════════════════════════════════════════════════════════════════════
# Conversation starters
# ══════════════════════════════════════════════════════════════════════════════

@ai_bp.route("/conversation-starters", methods=["POST"])
@require_user
def conversation_starters():
    data = require_json()
    link_id = parse_int(data.get("project_stakeholder_id") or data.get("stakeholder_id"))
    if link_id is None:
        return api_error(E.VALIDATION_REQUIRED, "project_stakeholder_id is required")

    link = stakeholder_service.get_project_stakeholder(g.user_id, link_id)
    result = _get_starter_assistant().generate(link.id, user_id=g.user_id)
    status = 200 if not result.get("error") else 422
    return jsonify(result), status


# ══════════════════════════════════════════════════════════════════════════════
# Change coach chat
# ══════════════════════════════════════════════════════════════════════════════

@ai_bp.route("/chat", methods=["POST"])
@require_user
def chat():
    data = require_json()
    question = (data.get("question") or data.get("message") or "").strip()
    if not question:
        return api_error(E.VALIDATION_REQUIRED, "question is required")

    project_id = parse_int(data.get("project_id"))
    if project_id is not None:
        ensure_owner(g.user_id, project_id)

    result = _get_chat_assistant().ask(g.user_id, question, project_id=project_id)
    status = 200 if not result.get("error") else 422
    return jsonify(result), status
