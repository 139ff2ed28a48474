"""
Script Service.

The user's conversation script library. Scripts are ordered by how often they
were used, then newest first; parsed conversation starters are saved here.
"""

import logging

from sqlalchemy import select, update

from app.ai.starter_parser import DEFAULT_TAG, TAG_LABELS
from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.coaching import SCRIPT_TAGS, ConversationScript
from app.models.project import Project
from app.models.stakeholder import STAKEHOLDER_TYPES

logger = logging.getLogger(__name__)


def _clean_tags(tags) -> list[str]:
    if tags is None:
        return []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("tags must be a list of strings", details={"tags": "invalid"})
    unknown = [t for t in tags if t not in SCRIPT_TAGS]
    if unknown:
        raise ValidationError(
            f"Unknown tag(s): {', '.join(unknown)}",
            details={"tags": f"allowed: {', '.join(SCRIPT_TAGS)}"},
        )
    return list(dict.fromkeys(tags))


def _clean_type(value):
    if value in (None, ""):
        return None
    if value not in STAKEHOLDER_TYPES:
        raise ValidationError(
            f"stakeholder_type must be one of: {', '.join(STAKEHOLDER_TYPES)}",
            details={"stakeholder_type": "invalid"},
        )
    return value


def _owned_project_id(user_id: str, project_id):
    if project_id in (None, ""):
        return None
    project = db.session.get(Project, project_id)
    if project is None or project.user_id != user_id:
        raise NotFoundError(resource="Project", resource_id=project_id)
    return project.id


def _get_script(user_id: str, script_id: int) -> ConversationScript:
    script = db.session.get(ConversationScript, script_id)
    if script is None or script.user_id != user_id:
        raise NotFoundError(resource="Script", resource_id=script_id)
    return script


def list_scripts(user_id: str, *, project_id=None, tag=None, stakeholder_type=None) -> list[dict]:
    """Scripts for ``user_id``, most used first.

    The tag filter runs in Python because JSON containment is not portable
    across the SQLite and PostgreSQL backends.
    """
    stmt = select(ConversationScript).where(ConversationScript.user_id == user_id)
    if project_id is not None:
        stmt = stmt.where(ConversationScript.project_id == project_id)
    if stakeholder_type:
        stmt = stmt.where(ConversationScript.stakeholder_type == stakeholder_type)
    stmt = stmt.order_by(
        ConversationScript.times_used.desc(),
        ConversationScript.created_at.desc(),
        ConversationScript.id.desc(),
    )
    rows = db.session.execute(stmt).scalars().all()
    if tag:
        rows = [s for s in rows if tag in (s.tags or [])]
    return [s.to_dict() for s in rows]


def create_script(user_id: str, data: dict) -> dict:
    title = (data.get("title") or "").strip()
    content = (data.get("content") or "").strip()
    if not title or not content:
        raise ValidationError(
            "title and content are required",
            details={k: "required" for k, v in (("title", title), ("content", content)) if not v},
        )

    script = ConversationScript(
        user_id=user_id,
        project_id=_owned_project_id(user_id, data.get("project_id")),
        title=title[:300],
        content=content,
        tags=_clean_tags(data.get("tags")),
        stakeholder_type=_clean_type(data.get("stakeholder_type")),
    )
    db.session.add(script)
    db.session.commit()
    logger.info("Script created", extra={"user_id": user_id, "script_id": script.id})
    return script.to_dict()


def update_script(user_id: str, script_id: int, data: dict) -> dict:
    script = _get_script(user_id, script_id)
    if "title" in data:
        title = (data["title"] or "").strip()
        if not title:
            raise ValidationError("title cannot be empty", details={"title": "required"})
        script.title = title[:300]
    if "content" in data:
        content = (data["content"] or "").strip()
        if not content:
            raise ValidationError("content cannot be empty", details={"content": "required"})
        script.content = content
    if "tags" in data:
        script.tags = _clean_tags(data["tags"])
    if "stakeholder_type" in data:
        script.stakeholder_type = _clean_type(data["stakeholder_type"])
    db.session.commit()
    logger.info("Script updated", extra={"user_id": user_id, "script_id": script.id})
    return script.to_dict()


def increment_usage(user_id: str, script_id: int) -> dict:
    """Bump ``times_used`` by one with a single UPDATE."""
    script = _get_script(user_id, script_id)
    db.session.execute(
        update(ConversationScript)
        .where(ConversationScript.id == script.id)
        .values(times_used=ConversationScript.times_used + 1)
    )
    db.session.commit()
    db.session.refresh(script)
    return script.to_dict()


def delete_script(user_id: str, script_id: int) -> None:
    script = _get_script(user_id, script_id)
    db.session.delete(script)
    db.session.commit()
    logger.info("Script deleted", extra={"user_id": user_id, "script_id": script_id})


def save_from_starter(user_id: str, data: dict) -> dict:
    """Save a parsed conversation starter as a script.

    Expects ``phrase``, ``stakeholder_name`` and optionally ``tag`` (falls back
    to ``suggestedTag``, then the default tag), ``stakeholder_type`` and
    ``project_id``.
    """
    phrase = (data.get("phrase") or "").strip()
    if not phrase:
        raise ValidationError("phrase is required", details={"phrase": "required"})
    tag = data.get("tag") or data.get("suggestedTag") or DEFAULT_TAG
    name = (data.get("stakeholder_name") or "").strip() or "Stakeholder"

    return create_script(
        user_id,
        {
            "project_id": data.get("project_id"),
            "title": f"{name} - {TAG_LABELS.get(tag, 'Script')}",
            "content": phrase,
            "tags": [tag],
            "stakeholder_type": data.get("stakeholder_type"),
        },
    )
