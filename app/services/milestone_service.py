"""
Milestone Service.

Project timeline events. Callers check project ownership for list/create;
update and delete resolve the project through the milestone itself.
"""

import logging

from sqlalchemy import select

from app.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from app.models import db
from app.models.project import MILESTONE_STATUSES, MILESTONE_TYPES, Milestone
from app.utils.helpers import parse_date

logger = logging.getLogger(__name__)


def _check_enum(field: str, value, allowed) -> str:
    if value not in allowed:
        raise ValidationError(
            f"{field} must be one of: {', '.join(sorted(allowed))}",
            details={field: "invalid"},
        )
    return value


def list_milestones(project_id: int) -> list[dict]:
    rows = db.session.execute(
        select(Milestone)
        .where(Milestone.project_id == project_id)
        .order_by(Milestone.date, Milestone.id)
    ).scalars().all()
    return [m.to_dict() for m in rows]


def create_milestone(project_id: int, data: dict) -> dict:
    """Create a milestone. ``name``, ``date`` and ``type`` are required.

    Raises:
        ValidationError: a required field is missing or an enum value is unknown.
    """
    name = (data.get("name") or "").strip()
    milestone_date = parse_date(data.get("date"))
    milestone_type = data.get("type")
    if not name or milestone_date is None or not milestone_type:
        raise ValidationError(
            "Missing required fields",
            details={
                k: "required"
                for k, missing in (("name", not name), ("date", milestone_date is None), ("type", not milestone_type))
                if missing
            },
        )

    milestone = Milestone(
        project_id=project_id,
        name=name[:200],
        date=milestone_date,
        type=_check_enum("type", milestone_type, MILESTONE_TYPES),
        status=_check_enum("status", data.get("status") or "upcoming", MILESTONE_STATUSES),
        description=data.get("description"),
        meeting_notes=data.get("meeting_notes"),
    )
    db.session.add(milestone)
    db.session.commit()
    logger.info("Milestone created", extra={"project_id": project_id, "milestone_id": milestone.id})
    return milestone.to_dict()


def get_milestone(user_id: str, milestone_id: int) -> Milestone:
    milestone = db.session.get(Milestone, milestone_id)
    if milestone is None:
        raise NotFoundError(resource="Milestone", resource_id=milestone_id)
    if milestone.project is None or milestone.project.user_id != user_id:
        raise AccessDeniedError("Forbidden")
    return milestone


def update_milestone(milestone: Milestone, data: dict) -> dict:
    if "name" in data:
        name = (data["name"] or "").strip()
        if not name:
            raise ValidationError("name cannot be empty", details={"name": "required"})
        milestone.name = name[:200]
    if "date" in data:
        new_date = parse_date(data["date"])
        if new_date is None:
            raise ValidationError("date must be a valid date", details={"date": "invalid"})
        milestone.date = new_date
    if "type" in data:
        milestone.type = _check_enum("type", data["type"], MILESTONE_TYPES)
    if "status" in data:
        milestone.status = _check_enum("status", data["status"], MILESTONE_STATUSES)
    for field in ("description", "meeting_notes"):
        if field in data:
            setattr(milestone, field, data[field])

    db.session.commit()
    logger.info(
        "Milestone updated",
        extra={"project_id": milestone.project_id, "milestone_id": milestone.id},
    )
    return milestone.to_dict()


def delete_milestone(milestone: Milestone) -> None:
    project_id, milestone_id = milestone.project_id, milestone.id
    db.session.delete(milestone)
    db.session.commit()
    logger.info("Milestone deleted", extra={"project_id": project_id, "milestone_id": milestone_id})
