"""
Ship or Sink: Change
AI Change Coach (chat).

Pipeline:
    1. Build cross-project context for the user
    2. Load the recent chat transcript (oldest first)
    3. Call LLM with system context + transcript + new question
    4. Persist both the question and the answer
"""

import logging

from app.ai.context_builder import render_context_prompt
from app.models import db
from app.models.project import Project
from app.services import chat_service
from app.services.ai_context_service import get_ai_context

logger = logging.getLogger(__name__)

CHAT_ERROR = "Sorry, I encountered an error. Please try again."

SYSTEM_PROMPT = (
    "You are the Ship or Sink AI Change Coach. You help change managers move "
    "stakeholders through the ADKAR stages (Awareness, Desire, Knowledge, "
    "Ability, Reinforcement). Be specific and practical, refer to people by "
    "name, and keep answers short."
)


class ChatAssistant:
    """Answers free-form coaching questions with the user's cross-project context."""

    def __init__(self, gateway=None, history_limit: int = 20):
        self.gateway = gateway
        self.history_limit = history_limit

    def _build_messages(self, user_id: str, question: str, project_id: int | None) -> list:
        context = get_ai_context(user_id)
        project = db.session.get(Project, project_id) if project_id else None
        system = f"{SYSTEM_PROMPT}\n\n{render_context_prompt(context, project.to_dict() if project else None)}"

        messages = [{"role": "system", "content": system}]
        for m in chat_service.list_messages(user_id, project_id, limit=self.history_limit):
            messages.append({"role": m["role"], "content": m["content"]})
        messages.append({"role": "user", "content": question})
        return messages

    def ask(self, user_id: str, question: str, project_id: int | None = None) -> dict:
        """
        Returns:
            dict with keys: response, error.
            On LLM failure ``response`` carries the generic apology text.
        """
        result = {"response": "", "error": None}

        question = (question or "").strip()
        if not question:
            result["error"] = "question is required"
            return result

        if not self.gateway:
            result["error"] = "LLM Gateway not available"
            return result

        messages = self._build_messages(user_id, question, project_id)
        chat_service.save_message(user_id, {"role": "user", "content": question, "project_id": project_id})

        try:
            response = self.gateway.chat(
                messages=messages,
                purpose="chat",
                user_id=user_id,
                project_id=project_id,
            )
            answer = response.get("content", "")
        except Exception as exc:
            logger.error("ChatAssistant LLM call failed: %s", exc)
            db.session.commit()
            result["response"] = CHAT_ERROR
            result["error"] = CHAT_ERROR
            return result

        chat_service.save_message(user_id, {"role": "assistant", "content": answer, "project_id": project_id})
        result["response"] = answer
        return result
