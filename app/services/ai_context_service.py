"""
AI Context Service.

Loads every row the AI coach may see for one user and hands them to the
cross-project context builder.
"""

import logging

from sqlalchemy import select

from app.ai.context_builder import build_cross_project_context
from app.models import db
from app.models.project import Project
from app.models.stakeholder import GlobalStakeholder, ProjectGroup, ProjectStakeholder, StakeholderGroup

logger = logging.getLogger(__name__)


def _stakeholder_row(person: GlobalStakeholder) -> dict:
    row = person.to_dict()
    group = person.group
    row["group"] = {"id": group.id, "name": group.name, "color": group.color} if group else None
    return row


def get_ai_context(user_id: str) -> dict:
    projects = db.session.execute(
        select(Project)
        .where(Project.user_id == user_id)
        .order_by(Project.created_at.desc(), Project.id.desc())
    ).scalars().all()
    project_ids = [p.id for p in projects]

    people = db.session.execute(
        select(GlobalStakeholder).where(GlobalStakeholder.user_id == user_id).order_by(GlobalStakeholder.name)
    ).scalars().all()
    groups = db.session.execute(
        select(StakeholderGroup).where(StakeholderGroup.user_id == user_id).order_by(StakeholderGroup.name)
    ).scalars().all()

    links = []
    group_links = []
    if project_ids:
        links = db.session.execute(
            select(ProjectStakeholder)
            .where(ProjectStakeholder.project_id.in_(project_ids))
            .order_by(ProjectStakeholder.created_at, ProjectStakeholder.id)
        ).scalars().all()
        group_links = db.session.execute(
            select(ProjectGroup)
            .where(ProjectGroup.project_id.in_(project_ids))
            .order_by(ProjectGroup.created_at, ProjectGroup.id)
        ).scalars().all()

    context = build_cross_project_context(
        projects=[p.to_dict() for p in projects],
        stakeholders=[_stakeholder_row(s) for s in people],
        project_stakeholders=[ps.to_dict() for ps in links],
        project_groups=[pg.to_dict() for pg in group_links],
        groups=[g.to_dict() for g in groups],
    )
    logger.debug(
        "AI context built",
        extra={"user_id": user_id, "projects": len(projects), "stakeholders": len(people)},
    )
    return context
