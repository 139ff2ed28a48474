"""
Project engagement analytics.

Functions:
    - aggregate_engagement:   pure engagement/risk rollup over stakeholder rows
    - get_project_analytics:  load a project's stakeholders and aggregate them

riskAssessment is simply 100 minus mean engagement. It is a display
heuristic, not a calibrated risk model.
"""

import logging

from sqlalchemy import select

from app.models import db
from app.models.stakeholder import ProjectStakeholder
from app.services.adkar import round_half_up

logger = logging.getLogger(__name__)


def aggregate_engagement(rows: list[dict]) -> dict:
    """Mean engagement, derived risk and a per-stakeholder breakdown.

    Args:
        rows: Dicts with ``engagement_score`` and optionally ``name`` and
            ``performance_score``.

    Returns:
        {"engagementLevel", "riskAssessment", "breakdown": [{name, engagement, performance}]}.
        All zero with an empty breakdown when ``rows`` is empty.
    """
    if not rows:
        return {"engagementLevel": 0, "riskAssessment": 0, "breakdown": []}

    total = sum(row.get("engagement_score") or 0 for row in rows)
    engagement_level = round_half_up(total / len(rows))

    return {
        "engagementLevel": engagement_level,
        "riskAssessment": round_half_up(100 - engagement_level),
        "breakdown": [
            {
                "name": row.get("name", ""),
                "engagement": row.get("engagement_score"),
                "performance": row.get("performance_score"),
            }
            for row in rows
        ],
    }


def get_project_analytics(project_id: int) -> dict:
    """Aggregate engagement for every stakeholder linked to ``project_id``."""
    links = db.session.execute(
        select(ProjectStakeholder)
        .where(ProjectStakeholder.project_id == project_id)
        .order_by(ProjectStakeholder.created_at)
    ).scalars().all()

    result = aggregate_engagement([link.to_dict() for link in links])
    logger.debug(
        "Project analytics computed",
        extra={"project_id": project_id, "stakeholder_count": len(links)},
    )
    return result
