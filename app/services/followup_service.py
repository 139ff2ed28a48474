"""
Follow-up Service.

Dated reminders to reconnect with a project stakeholder. ``stakeholder_id``
on a follow-up references the project-stakeholder link, not the directory
person, so the reminder disappears with the link.
"""

import logging
from datetime import date

from sqlalchemy import select

from app.core.exceptions import NotFoundError, ValidationError
from app.models import db
from app.models.coaching import ScheduledFollowup
from app.models.project import Project
from app.models.stakeholder import ProjectStakeholder
from app.utils.helpers import parse_date

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5


def _get_followup(user_id: str, followup_id: int) -> ScheduledFollowup:
    followup = db.session.get(ScheduledFollowup, followup_id)
    if followup is None or followup.user_id != user_id:
        raise NotFoundError(resource="Followup", resource_id=followup_id)
    return followup


def _required_date(value) -> date:
    parsed = parse_date(value)
    if parsed is None:
        raise ValidationError("scheduled_date must be a valid date", details={"scheduled_date": "invalid"})
    return parsed


def list_followups(
    user_id: str,
    *,
    project_id: int | None = None,
    stakeholder_id: int | None = None,
    upcoming: bool = False,
    today: date | None = None,
) -> list[dict]:
    """Follow-ups ordered by date.

    With ``upcoming`` only open follow-ups dated today or later are returned,
    at most five.
    """
    stmt = select(ScheduledFollowup).where(ScheduledFollowup.user_id == user_id)
    if project_id is not None:
        stmt = stmt.where(ScheduledFollowup.project_id == project_id)
    if stakeholder_id is not None:
        stmt = stmt.where(ScheduledFollowup.stakeholder_id == stakeholder_id)
    if upcoming:
        stmt = stmt.where(
            ScheduledFollowup.completed.is_(False),
            ScheduledFollowup.scheduled_date >= (today or date.today()),
        )
    stmt = stmt.order_by(ScheduledFollowup.scheduled_date, ScheduledFollowup.id)
    if upcoming:
        stmt = stmt.limit(UPCOMING_LIMIT)
    return [f.to_dict() for f in db.session.execute(stmt).scalars().unique().all()]


def create_followup(user_id: str, data: dict) -> dict:
    """
    Raises:
        ValidationError: title/date missing, or the stakeholder is not on the project.
        NotFoundError: project missing or not the caller's.
    """
    project_id = data.get("project_id")
    project = db.session.get(Project, project_id) if project_id else None
    if project is None or project.user_id != user_id:
        raise NotFoundError(resource="Project", resource_id=project_id)

    title = (data.get("title") or "").strip()
    if not title:
        raise ValidationError("title is required", details={"title": "required"})

    stakeholder_id = data.get("stakeholder_id") or None
    if stakeholder_id is not None:
        link = db.session.get(ProjectStakeholder, stakeholder_id)
        if link is None or link.project_id != project.id:
            raise ValidationError(
                "stakeholder_id is not a stakeholder on this project",
                details={"stakeholder_id": "unknown"},
            )

    followup = ScheduledFollowup(
        user_id=user_id,
        project_id=project.id,
        stakeholder_id=stakeholder_id,
        scheduled_date=_required_date(data.get("scheduled_date")),
        title=title[:300],
        notes=data.get("notes") or None,
    )
    db.session.add(followup)
    db.session.commit()
    logger.info(
        "Follow-up scheduled",
        extra={"user_id": user_id, "project_id": project.id, "followup_id": followup.id},
    )
    return followup.to_dict()


def update_followup(user_id: str, followup_id: int, data: dict) -> dict:
    followup = _get_followup(user_id, followup_id)
    if "scheduled_date" in data:
        followup.scheduled_date = _required_date(data["scheduled_date"])
    if "title" in data:
        title = (data["title"] or "").strip()
        if not title:
            raise ValidationError("title cannot be empty", details={"title": "required"})
        followup.title = title[:300]
    if "notes" in data:
        followup.notes = data["notes"] or None
    if "completed" in data:
        followup.completed = bool(data["completed"])
    db.session.commit()
    logger.info(
        "Follow-up updated",
        extra={"user_id": user_id, "followup_id": followup.id, "completed": followup.completed},
    )
    return followup.to_dict()


def delete_followup(user_id: str, followup_id: int) -> None:
    followup = _get_followup(user_id, followup_id)
    db.session.delete(followup)
    db.session.commit()
    logger.info("Follow-up deleted", extra={"user_id": user_id, "followup_id": followup_id})
