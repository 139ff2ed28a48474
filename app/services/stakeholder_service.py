"""
Stakeholder Service.

Business logic for the user's people directory and for the per-project score
records that link a directory person to a project.

Functions:
    - list_global_stakeholders:    Directory, ordered by name, optional group filter
    - create_global_stakeholder:   Create a person (single is_me per user)
    - update_global_stakeholder:   Partial update (single is_me per user)
    - delete_global_stakeholder:   Refused while linked to projects unless force
    - list_project_stakeholders:   Flattened person + project scores for one project
    - add_project_stakeholder:     Link new or existing person with default scores
    - get_project_stakeholder:     Fetch a link the caller owns
    - update_project_stakeholder:  Split global vs project fields, recompute performance
    - remove_project_stakeholder:  Delete the link only, never the person
    - list_score_history:          Newest-first score snapshots
    - get_adkar_summary:           ADKAR rollup for one link
"""

import logging

from sqlalchemy import func, select, update

from app.core.exceptions import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from app.models import db
from app.models.project import Project
from app.models.stakeholder import (
    ADKAR_FIELDS,
    STAKEHOLDER_TYPES,
    GlobalStakeholder,
    ProjectStakeholder,
    ScoreHistory,
    StakeholderGroup,
)
from app.services.adkar import ADKAR_STAGES, adkar_rollup, performance_from_adkar
from app.utils.helpers import parse_date

logger = logging.getLogger(__name__)

GLOBAL_FIELDS = ("name", "email", "phone", "role", "title", "department", "location", "notes")
LINK_GLOBAL_FIELDS = ("name", "email", "phone", "role", "title", "department", "notes")

NEW_LINK_DEFAULTS = {
    "stakeholder_type": "neutral",
    "influence_level": 5,
    "support_level": 5,
    "awareness": 50,
    "desire": 50,
    "knowledge": 50,
    "ability": 50,
    "reinforcement": 50,
    "engagement_score": 0,
    "performance_score": 0,
}


# ── Validation helpers ───────────────────────────────────────────────────────


def _score(data: dict, field: str, low: int = 0, high: int = 100):
    value = data.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or int(value) != value:
        raise ValidationError(f"{field} must be an integer", details={field: "not an integer"})
    value = int(value)
    if not low <= value <= high:
        raise ValidationError(
            f"{field} must be between {low} and {high}",
            details={field: f"out of range {low}-{high}"},
        )
    return value


def _required_score(data: dict, field: str) -> int:
    """``_score`` for columns that must never be NULL; an explicit null is rejected."""
    if data.get(field) is None:
        raise ValidationError(f"{field} cannot be null", details={field: "required"})
    return _score(data, field)


def _stakeholder_type(value):
    if value in (None, ""):
        return None
    if value not in STAKEHOLDER_TYPES:
        raise ValidationError(
            f"stakeholder_type must be one of: {', '.join(STAKEHOLDER_TYPES)}",
            details={"stakeholder_type": "invalid"},
        )
    return value


def _owned_group_id(user_id: str, group_id):
    if group_id in (None, ""):
        return None
    group = db.session.get(StakeholderGroup, group_id)
    if group is None or group.user_id != user_id:
        raise ValidationError("group_id does not reference one of your groups", details={"group_id": "unknown"})
    return group.id


def _owned_manager_id(user_id: str, manager_id, self_id=None):
    if manager_id in (None, ""):
        return None
    manager = db.session.get(GlobalStakeholder, manager_id)
    if manager is None or manager.user_id != user_id:
        raise ValidationError("reports_to_id does not reference one of your people", details={"reports_to_id": "unknown"})
    if self_id is not None and manager.id == self_id:
        raise ValidationError("A person cannot report to themselves", details={"reports_to_id": "self"})
    return manager.id


def _clear_is_me(user_id: str, keep_id=None) -> None:
    stmt = (
        update(GlobalStakeholder)
        .where(GlobalStakeholder.user_id == user_id, GlobalStakeholder.is_me.is_(True))
        .values(is_me=False)
    )
    if keep_id is not None:
        stmt = stmt.where(GlobalStakeholder.id != keep_id)
    db.session.execute(stmt)


# ── Directory (global stakeholders) ──────────────────────────────────────────


def _get_global(user_id: str, stakeholder_id: int) -> GlobalStakeholder:
    person = db.session.get(GlobalStakeholder, stakeholder_id)
    if person is None or person.user_id != user_id:
        raise NotFoundError(resource="Stakeholder", resource_id=stakeholder_id)
    return person


def list_global_stakeholders(user_id: str, group_id: int | None = None) -> list[dict]:
    stmt = select(GlobalStakeholder).where(GlobalStakeholder.user_id == user_id)
    if group_id is not None:
        stmt = stmt.where(GlobalStakeholder.group_id == group_id)
    rows = db.session.execute(stmt.order_by(GlobalStakeholder.name)).scalars().all()
    return [s.to_dict() for s in rows]


def create_global_stakeholder(user_id: str, data: dict) -> dict:
    """Create a directory person.

    Setting ``is_me`` clears the flag on every other person of this user.

    Raises:
        ValidationError: name missing, or group/manager not owned by the user.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("name is required", details={"name": "required"})

    is_me = bool(data.get("is_me"))
    if is_me:
        _clear_is_me(user_id)

    person = GlobalStakeholder(
        user_id=user_id,
        name=name[:200],
        group_id=_owned_group_id(user_id, data.get("group_id")),
        org_level=data.get("org_level") or None,
        reports_to_id=_owned_manager_id(user_id, data.get("reports_to_id")),
        is_me=is_me,
        avatar_url=data.get("avatar_url") or None,
    )
    for field in GLOBAL_FIELDS[1:]:
        setattr(person, field, data.get(field) or "")

    db.session.add(person)
    db.session.commit()
    logger.info(
        "Global stakeholder created",
        extra={"user_id": user_id, "stakeholder_id": person.id, "is_me": is_me},
    )
    return person.to_dict()


def update_global_stakeholder(user_id: str, stakeholder_id: int, data: dict) -> dict:
    person = _get_global(user_id, stakeholder_id)

    if data.get("is_me") is True:
        _clear_is_me(user_id, keep_id=person.id)

    for field in GLOBAL_FIELDS:
        if field in data:
            setattr(person, field, data[field] if data[field] is not None else "")
    if "name" in data and not (person.name or "").strip():
        raise ValidationError("name cannot be empty", details={"name": "required"})
    if "group_id" in data:
        person.group_id = _owned_group_id(user_id, data["group_id"])
    if "org_level" in data:
        person.org_level = data["org_level"] or None
    if "reports_to_id" in data:
        person.reports_to_id = _owned_manager_id(user_id, data["reports_to_id"], self_id=person.id)
    if "is_me" in data:
        person.is_me = bool(data["is_me"])
    if "avatar_url" in data:
        person.avatar_url = data["avatar_url"] or None

    db.session.commit()
    logger.info("Global stakeholder updated", extra={"user_id": user_id, "stakeholder_id": person.id})
    return person.to_dict()


def delete_global_stakeholder(user_id: str, stakeholder_id: int, *, force: bool = False) -> None:
    """Delete a directory person.

    Without ``force`` the delete is refused while the person is linked to any
    project. With ``force`` their project links and score history go too.

    Raises:
        NotFoundError: not the caller's person.
        ValidationError: still linked and ``force`` is false.
    """
    person = _get_global(user_id, stakeholder_id)

    linked = db.session.execute(
        select(func.count(ProjectStakeholder.id)).where(ProjectStakeholder.stakeholder_id == person.id)
    ).scalar_one()
    if linked and not force:
        raise ValidationError(
            f"This person is linked to {linked} project(s). Remove them from projects first, "
            "or use force=true to delete everywhere.",
            details={"linked_projects": linked},
        )

    db.session.execute(
        update(GlobalStakeholder)
        .where(GlobalStakeholder.reports_to_id == person.id)
        .values(reports_to_id=None)
    )
    db.session.delete(person)
    db.session.commit()
    logger.info(
        "Global stakeholder deleted",
        extra={"user_id": user_id, "stakeholder_id": stakeholder_id, "linked_projects": linked},
    )


# ── Project stakeholders ─────────────────────────────────────────────────────


def list_project_stakeholders(project_id: int) -> list[dict]:
    rows = db.session.execute(
        select(ProjectStakeholder)
        .where(ProjectStakeholder.project_id == project_id)
        .order_by(ProjectStakeholder.created_at, ProjectStakeholder.id)
    ).scalars().all()
    return [ps.to_dict() for ps in rows]


def _record_history(link: ProjectStakeholder) -> ScoreHistory:
    entry = ScoreHistory(
        project_stakeholder_id=link.id,
        engagement_score=link.engagement_score if link.engagement_score is not None else 0,
        performance_score=link.performance_score if link.performance_score is not None else 0,
    )
    for field in ADKAR_FIELDS:
        value = getattr(link, field)
        setattr(entry, field, value if value is not None else 0)
    db.session.add(entry)
    return entry


def add_project_stakeholder(project_id: int, data: dict) -> dict:
    """Link a person to a project with default scores.

    ``stakeholder_id`` links an existing directory person. Without it a new
    person is created in the project owner's directory from ``name``,
    ``role``, ``email``, ``phone`` and ``department``. An initial score
    history row is written alongside the link.

    Raises:
        NotFoundError: project or referenced person missing.
        ValidationError: no stakeholder_id and no name.
        ConflictError: the person is already on this project.
    """
    project = db.session.get(Project, project_id)
    if project is None:
        raise NotFoundError(resource="Project", resource_id=project_id)

    stakeholder_id = data.get("stakeholder_id")
    if stakeholder_id:
        person = _get_global(project.user_id, stakeholder_id)
        duplicate = db.session.execute(
            select(ProjectStakeholder.id).where(
                ProjectStakeholder.project_id == project_id,
                ProjectStakeholder.stakeholder_id == person.id,
            )
        ).scalar_one_or_none()
        if duplicate is not None:
            raise ConflictError("ProjectStakeholder", "stakeholder_id", str(person.id),
                                message=f"{person.name} is already on this project")
    else:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("name or stakeholder_id is required", details={"name": "required"})
        person = GlobalStakeholder(
            user_id=project.user_id,
            name=name[:200],
            role=data.get("role") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            department=data.get("department") or "",
        )
        db.session.add(person)
        db.session.flush()

    link = ProjectStakeholder(project_id=project_id, stakeholder_id=person.id, **NEW_LINK_DEFAULTS)
    db.session.add(link)
    db.session.flush()
    _record_history(link)
    db.session.commit()

    logger.info(
        "Stakeholder added to project",
        extra={"user_id": project.user_id, "project_id": project_id, "stakeholder_id": person.id},
    )
    return link.to_dict()


def get_project_stakeholder(user_id: str, link_id: int) -> ProjectStakeholder:
    """Fetch a link for a mutating call.

    Raises:
        NotFoundError: no such link.
        AccessDeniedError: the link's project belongs to someone else.
    """
    link = db.session.get(ProjectStakeholder, link_id)
    if link is None:
        raise NotFoundError(resource="Stakeholder", resource_id=link_id)
    if link.project is None or link.project.user_id != user_id:
        raise AccessDeniedError("Forbidden")
    return link


def update_project_stakeholder(link: ProjectStakeholder, data: dict) -> dict:
    """Apply a partial update to a link and its directory person.

    Person fields (name, email, ...) change the person everywhere. Project
    fields change only this link. ADKAR values may arrive under either
    ``awareness`` or the older ``awareness_score`` key; the ``_score`` key
    wins when both are sent. Any ADKAR change recomputes
    ``performance_score``; a manually sent performance_score is ignored.
    A score history row is written when engagement or any ADKAR value changes.
    """
    person = link.stakeholder
    owner_id = link.project.user_id

    # Person (directory) fields
    for field in LINK_GLOBAL_FIELDS:
        if field in data:
            setattr(person, field, data[field] if data[field] is not None else "")
    if "name" in data and not (person.name or "").strip():
        raise ValidationError("name cannot be empty", details={"name": "required"})
    if "group_id" in data:
        person.group_id = _owned_group_id(owner_id, data["group_id"])

    # Project fields
    if "stakeholder_type" in data:
        link.stakeholder_type = _stakeholder_type(data["stakeholder_type"])
    if "influence_level" in data:
        link.influence_level = _score(data, "influence_level", 0, 10)
    if "support_level" in data:
        link.support_level = _score(data, "support_level", 0, 10)
    if "engagement_score" in data:
        link.engagement_score = _required_score(data, "engagement_score")
    if "last_contact_date" in data:
        link.last_contact_date = parse_date(data["last_contact_date"])
    if "project_notes" in data:
        link.project_notes = data["project_notes"] or ""
    if "comments" in data:
        link.project_notes = data["comments"] or ""

    adkar_updates = {}
    for field in ADKAR_FIELDS:
        alias = f"{field}_score"
        if alias in data:
            adkar_updates[field] = _required_score(data, alias)
        elif field in data:
            adkar_updates[field] = _required_score(data, field)

    if adkar_updates:
        link.performance_score = performance_from_adkar(adkar_updates, link.adkar_scores())
        for field, value in adkar_updates.items():
            setattr(link, field, value)

    if "engagement_score" in data or adkar_updates:
        _record_history(link)

    db.session.commit()
    logger.info(
        "Project stakeholder updated",
        extra={
            "user_id": owner_id,
            "project_id": link.project_id,
            "project_stakeholder_id": link.id,
            "adkar_changed": bool(adkar_updates),
        },
    )
    return link.to_dict()


def remove_project_stakeholder(link: ProjectStakeholder) -> None:
    project_id, link_id = link.project_id, link.id
    db.session.delete(link)
    db.session.commit()
    logger.info(
        "Stakeholder removed from project",
        extra={"project_id": project_id, "project_stakeholder_id": link_id},
    )


def list_score_history(link_id: int, limit: int = 100) -> list[dict]:
    rows = db.session.execute(
        select(ScoreHistory)
        .where(ScoreHistory.project_stakeholder_id == link_id)
        .order_by(ScoreHistory.recorded_at.desc(), ScoreHistory.id.desc())
        .limit(limit)
    ).scalars().all()
    return [h.to_dict() for h in rows]


def get_adkar_summary(link: ProjectStakeholder) -> dict:
    """Rollup plus per-stage coaching text for the ADKAR panel."""
    scores = link.adkar_scores()
    rollup = adkar_rollup(*(scores[key] for key in ADKAR_FIELDS))
    return {
        "project_stakeholder_id": link.id,
        "scores": scores,
        **rollup,
        "stages": [
            {
                "key": stage["key"],
                "label": stage["label"],
                "question": stage["question"],
                "score": scores[stage["key"]],
                "tip": stage["low_tip"] if (scores[stage["key"]] or 0) < 50 else stage["high_tip"],
            }
            for stage in ADKAR_STAGES
        ],
    }
