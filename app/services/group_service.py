"""
Group Service.

Stakeholder groups live in the user's directory; a ProjectGroup row gives a
group its sentiment and ADKAR scores inside one project.
"""

import logging

from sqlalchemy import func, select

from app.core.exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from app.models import db
from app.models.project import Project
from app.models.stakeholder import (
    ADKAR_FIELDS,
    DEFAULT_GROUP_COLOR,
    GROUP_SENTIMENTS,
    GlobalStakeholder,
    ProjectGroup,
    StakeholderGroup,
)

logger = logging.getLogger(__name__)

NEW_GROUP_LINK_DEFAULTS = {
    "group_sentiment": "neutral",
    "influence_level": 5,
    "awareness": 50,
    "desire": 50,
    "knowledge": 50,
    "ability": 50,
    "reinforcement": 50,
}


def _bounded_int(data: dict, field: str, low: int, high: int):
    value = data.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{field} must be an integer", details={field: "not an integer"})
    if not low <= value <= high:
        raise ValidationError(
            f"{field} must be between {low} and {high}",
            details={field: f"out of range {low}-{high}"},
        )
    return int(value)


def _get_group(user_id: str, group_id: int) -> StakeholderGroup:
    group = db.session.get(StakeholderGroup, group_id)
    if group is None or group.user_id != user_id:
        raise NotFoundError(resource="Group", resource_id=group_id)
    return group


def _link(project_id: int, group_id: int) -> ProjectGroup:
    duplicate = db.session.execute(
        select(ProjectGroup.id).where(
            ProjectGroup.project_id == project_id,
            ProjectGroup.group_id == group_id,
        )
    ).scalar_one_or_none()
    if duplicate is not None:
        raise ConflictError("ProjectGroup", "group_id", str(group_id),
                            message="This group is already on the project")
    link = ProjectGroup(project_id=project_id, group_id=group_id, **NEW_GROUP_LINK_DEFAULTS)
    db.session.add(link)
    return link


# ── Directory groups ─────────────────────────────────────────────────────────


def list_groups(user_id: str) -> list[dict]:
    """User's groups ordered by name, each with its directory member count."""
    counts = dict(
        db.session.execute(
            select(GlobalStakeholder.group_id, func.count(GlobalStakeholder.id))
            .where(GlobalStakeholder.user_id == user_id, GlobalStakeholder.group_id.isnot(None))
            .group_by(GlobalStakeholder.group_id)
        ).all()
    )
    rows = db.session.execute(
        select(StakeholderGroup)
        .where(StakeholderGroup.user_id == user_id)
        .order_by(StakeholderGroup.name)
    ).scalars().all()
    return [{**g.to_dict(), "member_count": counts.get(g.id, 0)} for g in rows]


def create_group(user_id: str, data: dict) -> dict:
    """Create a group; link it to ``project_id`` in the same commit when given.

    Raises:
        ValidationError: name missing.
        AccessDeniedError: project_id given but not owned by the caller.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("name is required", details={"name": "required"})

    project_id = data.get("project_id")
    if project_id is not None:
        project = db.session.get(Project, project_id)
        if project is None or project.user_id != user_id:
            raise AccessDeniedError("Forbidden")

    group = StakeholderGroup(
        user_id=user_id,
        name=name[:200],
        description=data.get("description") or "",
        color=data.get("color") or DEFAULT_GROUP_COLOR,
    )
    db.session.add(group)
    db.session.flush()

    link = _link(project_id, group.id) if project_id is not None else None
    db.session.commit()

    logger.info(
        "Group created",
        extra={"user_id": user_id, "group_id": group.id, "project_id": project_id},
    )
    if link is not None:
        return link.to_dict()
    return group.to_dict()


def update_group(user_id: str, group_id: int, data: dict) -> dict:
    group = _get_group(user_id, group_id)
    if "name" in data:
        name = (data["name"] or "").strip()
        if not name:
            raise ValidationError("name cannot be empty", details={"name": "required"})
        group.name = name[:200]
    if "description" in data:
        group.description = data["description"] or ""
    if "color" in data:
        group.color = data["color"] or DEFAULT_GROUP_COLOR
    db.session.commit()
    logger.info("Group updated", extra={"user_id": user_id, "group_id": group.id})
    return group.to_dict()


def delete_group(user_id: str, group_id: int) -> None:
    """Delete a group. Members stay in the directory with no group."""
    group = _get_group(user_id, group_id)
    for member in group.members:
        member.group_id = None
    db.session.delete(group)
    db.session.commit()
    logger.info("Group deleted", extra={"user_id": user_id, "group_id": group_id})


# ── Project groups ───────────────────────────────────────────────────────────


def list_project_groups(project_id: int) -> list[dict]:
    rows = db.session.execute(
        select(ProjectGroup)
        .where(ProjectGroup.project_id == project_id)
        .order_by(ProjectGroup.created_at, ProjectGroup.id)
    ).scalars().all()
    return [pg.to_dict() for pg in rows]


def link_group(user_id: str, project_id: int, group_id) -> dict:
    if not group_id:
        raise ValidationError("group_id is required", details={"group_id": "required"})
    group = _get_group(user_id, group_id)
    link = _link(project_id, group.id)
    db.session.commit()
    logger.info(
        "Group linked to project",
        extra={"user_id": user_id, "project_id": project_id, "group_id": group.id},
    )
    return link.to_dict()


def get_project_group(user_id: str, link_id: int) -> ProjectGroup:
    link = db.session.get(ProjectGroup, link_id)
    if link is None:
        raise NotFoundError(resource="ProjectGroup", resource_id=link_id)
    if link.project is None or link.project.user_id != user_id:
        raise AccessDeniedError("Forbidden")
    return link


def update_project_group(link: ProjectGroup, data: dict) -> dict:
    """Update project-level sentiment, influence, ADKAR and notes."""
    if "group_sentiment" in data:
        sentiment = data["group_sentiment"] or "neutral"
        if sentiment not in GROUP_SENTIMENTS:
            raise ValidationError(
                f"group_sentiment must be one of: {', '.join(GROUP_SENTIMENTS)}",
                details={"group_sentiment": "invalid"},
            )
        link.group_sentiment = sentiment
    if "influence_level" in data:
        link.influence_level = _bounded_int(data, "influence_level", 0, 10)
    for field in ADKAR_FIELDS:
        if field in data:
            setattr(link, field, _bounded_int(data, field, 0, 100))
    if "project_notes" in data:
        link.project_notes = data["project_notes"] or ""

    db.session.commit()
    logger.info(
        "Project group updated",
        extra={"project_id": link.project_id, "group_id": link.group_id},
    )
    return link.to_dict()


def unlink_group(link: ProjectGroup) -> None:
    project_id, group_id = link.project_id, link.group_id
    db.session.delete(link)
    db.session.commit()
    logger.info("Group unlinked from project", extra={"project_id": project_id, "group_id": group_id})
