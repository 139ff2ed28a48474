"""
Ship or Sink: Change
Conversation Starters Assistant.

Pipeline:
    1. Load the project stakeholder (person + project scores)
    2. Build the numbered-list prompt from their type, scores and notes
    3. Call LLM → free text
    4. Parse into starters; an empty parse means the caller shows raw text

Nothing is persisted here except the usage log. Saving a starter is a
separate, explicit call into the script library.
"""

import logging

from app.ai.starter_parser import parse_starters
from app.models import db
from app.models.stakeholder import ProjectStakeholder
from app.services.analytics_service import aggregate_engagement

logger = logging.getLogger(__name__)

STAKEHOLDER_TYPE_LABELS = {
    "champion": "Champion",
    "early_adopter": "Early Adopter",
    "neutral": "Neutral",
    "skeptic": "Skeptic",
    "resistant": "Resistant",
}

GENERATION_ERROR = (
    "Sorry, I encountered an error generating conversation starters. Please try again."
)

SYSTEM_PROMPT = (
    "You are an experienced organizational change management coach. "
    "You give concrete, practical advice grounded in the ADKAR model."
)


def build_starter_prompt(stakeholder: dict) -> str:
    """User prompt asking for five quoted starters. ADKAR scores default to 50."""
    type_label = STAKEHOLDER_TYPE_LABELS.get(stakeholder.get("stakeholder_type") or "", "Unknown")
    return (
        f"Give me 5 specific conversation starters for {stakeholder.get('name')} "
        f"({stakeholder.get('role')}, {type_label} type). "
        f"Their engagement is {stakeholder.get('engagement_score')}/100 and "
        f"performance is {stakeholder.get('performance_score')}/100. "
        f"ADKAR scores: Awareness {stakeholder.get('awareness') or 50}, "
        f"Desire {stakeholder.get('desire') or 50}, "
        f"Knowledge {stakeholder.get('knowledge') or 50}, "
        f"Ability {stakeholder.get('ability') or 50}, "
        f"Reinforcement {stakeholder.get('reinforcement') or 50}. "
        f"Notes about them: {stakeholder.get('project_notes') or 'No notes yet'}. "
        "Format as a numbered list with the exact phrases I should say in quotes, "
        "followed by a brief explanation of why each works."
    )


def build_project_context(project: dict, analytics: dict) -> str:
    return (
        f"Project: {project.get('name')}\n"
        f"Status: {project.get('status')}\n"
        f"Risk level: {analytics['riskAssessment']}%\n"
        f"Overall engagement: {analytics['engagementLevel']}%"
    )


class ConversationStarterAssistant:
    """Generates tailored opening lines for one project stakeholder."""

    def __init__(self, gateway=None):
        self.gateway = gateway

    def generate(self, project_stakeholder_id: int, *, user_id: str | None = None) -> dict:
        """
        Returns:
            dict with keys: stakeholder, starters, raw_response, error.
            ``starters`` is empty when the response had no numbered items.
        """
        result = {"stakeholder": None, "starters": [], "raw_response": "", "error": None}

        link = db.session.get(ProjectStakeholder, project_stakeholder_id)
        if link is None:
            result["error"] = "Stakeholder not found"
            return result

        stakeholder = link.to_dict()
        result["stakeholder"] = stakeholder

        if not self.gateway:
            result["error"] = "LLM Gateway not available"
            return result

        project = link.project
        peers = [ps.to_dict() for ps in project.stakeholder_links]
        messages = [
            {
                "role": "system",
                "content": f"{SYSTEM_PROMPT}\n\n{build_project_context(project.to_dict(), aggregate_engagement(peers))}",
            },
            {"role": "user", "content": build_starter_prompt(stakeholder)},
        ]

        try:
            response = self.gateway.chat(
                messages=messages,
                purpose="conversation_starters",
                user_id=user_id,
                project_id=link.project_id,
            )
        except Exception as exc:
            logger.error("ConversationStarterAssistant LLM call failed: %s", exc)
            db.session.commit()
            result["raw_response"] = GENERATION_ERROR
            result["error"] = GENERATION_ERROR
            return result

        db.session.commit()
        content = response.get("content", "")
        result["raw_response"] = content
        result["starters"] = parse_starters(content)
        logger.info(
            "Conversation starters generated",
            extra={
                "user_id": user_id,
                "project_id": link.project_id,
                "starter_count": len(result["starters"]),
            },
        )
        return result
