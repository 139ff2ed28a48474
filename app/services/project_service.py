"""
Project Service.

Projects have no HTTP CRUD surface of their own; every other entity hangs off
them, so creation, listing, ownership checks and team invites live here.

Functions:
    - create_project:            Create a project and auto-attach the owner's "me" profile
    - list_shared_projects:      Projects the given email was invited to
    - verify_project_ownership:  True when user_id owns project_id
    - can_read_project:          Owner or invited member
    - ensure_owner:              AccessDeniedError unless owner
    - list_members / invite_member / remove_member: team sharing
"""

import logging

from sqlalchemy import select

from app.core.exceptions import AccessDeniedError, NotFoundError, ValidationError
from app.models import db
from app.models.project import PROJECT_STATUSES, Project, ProjectMember
from app.models.stakeholder import GlobalStakeholder, ProjectStakeholder

logger = logging.getLogger(__name__)

# Scores given to the owner's own profile when it is attached to a new project.
ME_DEFAULT_SCORES = {
    "stakeholder_type": "champion",
    "influence_level": 8,
    "support_level": 10,
    "awareness": 100,
    "desire": 100,
    "knowledge": 80,
    "ability": 80,
    "reinforcement": 50,
    "engagement_score": 0,
    "performance_score": 82,
}


# ── Projects ─────────────────────────────────────────────────────────────────


def create_project(user_id: str, data: dict) -> dict:
    """Create a project, then link the user's ``is_me`` profile as a champion.

    The project commit and the "me" link commit are independent. A failure
    while attaching "me" is logged and the project is still returned.

    Raises:
        ValidationError: name missing or status invalid.
    """
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("name is required", details={"name": "required"})
    status = data.get("status") or "active"
    if status not in PROJECT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(sorted(PROJECT_STATUSES))}")

    project = Project(
        user_id=user_id,
        name=name[:200],
        status=status,
        description=data.get("description") or "",
        logo_url=data.get("logo_url"),
    )
    db.session.add(project)
    db.session.commit()
    logger.info("Project created", extra={"user_id": user_id, "project_id": project.id})

    _attach_me(user_id, project.id)
    return project.to_dict()


def _attach_me(user_id: str, project_id: int) -> None:
    me = db.session.execute(
        select(GlobalStakeholder).where(
            GlobalStakeholder.user_id == user_id,
            GlobalStakeholder.is_me.is_(True),
        )
    ).scalars().first()
    if me is None:
        return

    try:
        db.session.add(ProjectStakeholder(project_id=project_id, stakeholder_id=me.id, **ME_DEFAULT_SCORES))
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception(
            "Auto-add of 'me' stakeholder failed (non-fatal)",
            extra={"user_id": user_id, "project_id": project_id},
        )


def list_shared_projects(email: str) -> list[dict]:
    """Projects with a membership row for ``email``, newest first."""
    if not email:
        raise ValidationError("email required")
    project_ids = select(ProjectMember.project_id).where(
        ProjectMember.invited_email == email.lower()
    )
    rows = db.session.execute(
        select(Project)
        .where(Project.id.in_(project_ids))
        .order_by(Project.created_at.desc(), Project.id.desc())
    ).scalars().all()
    return [p.to_dict() for p in rows]


def verify_project_ownership(user_id: str | None, project_id: int) -> bool:
    if not user_id:
        return False
    owner = db.session.execute(
        select(Project.user_id).where(Project.id == project_id)
    ).scalar_one_or_none()
    return owner is not None and owner == user_id


def can_read_project(user_id: str | None, email: str | None, project_id: int) -> bool:
    if verify_project_ownership(user_id, project_id):
        return True
    if not email:
        return False
    member = db.session.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project_id,
            ProjectMember.invited_email == email.lower(),
        )
    ).scalar_one_or_none()
    return member is not None


def ensure_owner(user_id: str, project_id: int) -> None:
    """Raise AccessDeniedError unless ``user_id`` owns ``project_id``."""
    if not verify_project_ownership(user_id, project_id):
        raise AccessDeniedError("Forbidden")


# ── Team ─────────────────────────────────────────────────────────────────────


def list_members(project_id: int) -> list[dict]:
    rows = db.session.execute(
        select(ProjectMember)
        .where(ProjectMember.project_id == project_id)
        .order_by(ProjectMember.created_at, ProjectMember.id)
    ).scalars().all()
    return [m.to_dict() for m in rows]


def invite_member(project_id: int, invited_email: str) -> dict:
    """Grant read access to ``invited_email``. No email is sent.

    Raises:
        ValidationError: email missing, or already invited to this project.
    """
    email = (invited_email or "").strip().lower()
    if not email or "@" not in email:
        raise ValidationError("A valid invited_email is required", details={"invited_email": "invalid"})

    existing = db.session.execute(
        select(ProjectMember.id).where(
            ProjectMember.project_id == project_id,
            ProjectMember.invited_email == email,
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise ValidationError("Already invited")

    member = ProjectMember(project_id=project_id, invited_email=email)
    db.session.add(member)
    db.session.commit()
    logger.info("Project member invited", extra={"project_id": project_id, "member_id": member.id})
    return member.to_dict()


def remove_member(project_id: int, member_id: int) -> None:
    member = db.session.get(ProjectMember, member_id)
    if member is None or member.project_id != project_id:
        raise NotFoundError(resource="ProjectMember", resource_id=member_id)
    db.session.delete(member)
    db.session.commit()
    logger.info("Project member removed", extra={"project_id": project_id, "member_id": member_id})
