"""
Chat Service.

Append-only AI chat transcript and insight log, both scoped to the user and
optionally to one project.
"""

import logging

from sqlalchemy import delete, select

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.coaching import CHAT_ROLES, ChatInsight, ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_LIMIT = 20
DEFAULT_INSIGHT_LIMIT = 50


# ── Messages ─────────────────────────────────────────────────────────────────


def list_messages(user_id: str, project_id: int | None = None, limit: int = DEFAULT_MESSAGE_LIMIT) -> list[dict]:
    """Most recent ``limit`` messages, returned oldest first."""
    stmt = select(ChatMessage).where(ChatMessage.user_id == user_id)
    if project_id is not None:
        stmt = stmt.where(ChatMessage.project_id == project_id)
    stmt = stmt.order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()).limit(limit)
    rows = db.session.execute(stmt).scalars().all()
    return [m.to_dict() for m in reversed(rows)]


def save_message(user_id: str, data: dict) -> dict:
    role = data.get("role")
    content = data.get("content")
    if role not in CHAT_ROLES:
        raise ValidationError(
            f"role must be one of: {', '.join(sorted(CHAT_ROLES))}",
            details={"role": "invalid"},
        )
    if not content:
        raise ValidationError("content is required", details={"content": "required"})

    message = ChatMessage(
        user_id=user_id,
        project_id=data.get("project_id") or None,
        role=role,
        content=content,
    )
    db.session.add(message)
    db.session.commit()
    return message.to_dict()


def clear_messages(user_id: str, project_id: int | None = None) -> int:
    stmt = delete(ChatMessage).where(ChatMessage.user_id == user_id)
    if project_id is not None:
        stmt = stmt.where(ChatMessage.project_id == project_id)
    deleted = db.session.execute(stmt).rowcount
    db.session.commit()
    logger.info(
        "Chat history cleared",
        extra={"user_id": user_id, "project_id": project_id, "deleted": deleted},
    )
    return deleted


# ── Insights ─────────────────────────────────────────────────────────────────


def list_insights(
    user_id: str,
    project_id: int | None = None,
    stakeholder_id: int | None = None,
    limit: int = DEFAULT_INSIGHT_LIMIT,
) -> list[dict]:
    stmt = select(ChatInsight).where(ChatInsight.user_id == user_id)
    if project_id is not None:
        stmt = stmt.where(ChatInsight.project_id == project_id)
    if stakeholder_id is not None:
        stmt = stmt.where(ChatInsight.stakeholder_id == stakeholder_id)
    stmt = stmt.order_by(ChatInsight.created_at.desc(), ChatInsight.id.desc()).limit(limit)
    return [i.to_dict() for i in db.session.execute(stmt).scalars().all()]


def save_insight(user_id: str, data: dict) -> dict:
    text = (data.get("insight") or "").strip()
    if not text:
        raise ValidationError("insight is required", details={"insight": "required"})

    insight = ChatInsight(
        user_id=user_id,
        project_id=data.get("project_id") or None,
        stakeholder_id=data.get("stakeholder_id") or None,
        insight=text,
        insight_type=data.get("insight_type") or "general",
    )
    db.session.add(insight)
    db.session.commit()
    logger.info(
        "Chat insight saved",
        extra={"user_id": user_id, "project_id": insight.project_id, "insight_id": insight.id},
    )
    return insight.to_dict()


def delete_insight(user_id: str, insight_id: int) -> None:
    insight = db.session.get(ChatInsight, insight_id)
    if insight is None or insight.user_id != user_id:
        raise NotFoundError(resource="Insight", resource_id=insight_id)
    db.session.delete(insight)
    db.session.commit()
