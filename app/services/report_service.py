"""
Project report derivations.

The stage bucketing here works on a single engagement score and is
independent of the five explicit ADKAR scores in ``app.services.adkar``.
The two can disagree for the same stakeholder.

Functions:
    - adkar_stage_for_score:   engagement score -> stage label
    - engagement_trend:        up / down / neutral from the last two history rows
    - type_distribution:       stakeholder_type tally for the pie chart
    - change_readiness_score:  mean of average engagement and average performance
    - build_recommendations:   rule-based recommendation list
    - build_project_report:    assemble the full report payload for a project
"""

import logging
from collections import Counter

from sqlalchemy import select

from app.core.exceptions import NotFoundError
from app.models import db
from app.models.project import Project
from app.models.stakeholder import ProjectStakeholder, ScoreHistory
from app.services.adkar import round_half_up
from app.services.analytics_service import aggregate_engagement

logger = logging.getLogger(__name__)

_STAGE_THRESHOLDS = (
    (20, "Awareness"),
    (40, "Desire"),
    (60, "Knowledge"),
    (80, "Ability"),
)

NOT_SET = "not_set"


def adkar_stage_for_score(score) -> str:
    for upper, stage in _STAGE_THRESHOLDS:
        if score < upper:
            return stage
    return "Reinforcement"


def engagement_trend(history: list[dict]) -> str:
    """Compare the last two entries of a time-ascending history.

    Returns ``"up"``, ``"down"`` or ``"neutral"`` (equal, or fewer than two rows).
    """
    if len(history) < 2:
        return "neutral"
    latest = history[-1]["engagement_score"]
    previous = history[-2]["engagement_score"]
    if latest > previous:
        return "up"
    if latest < previous:
        return "down"
    return "neutral"


def type_distribution(stakeholders: list[dict]) -> dict[str, int]:
    counts = Counter(s.get("stakeholder_type") or NOT_SET for s in stakeholders)
    return dict(counts)


def change_readiness_score(stakeholders: list[dict]) -> int:
    if not stakeholders:
        return 0
    n = len(stakeholders)
    avg_engagement = sum(s.get("engagement_score") or 0 for s in stakeholders) / n
    avg_performance = sum(s.get("performance_score") or 0 for s in stakeholders) / n
    return round_half_up((avg_engagement + avg_performance) / 2)


def build_recommendations(stakeholders: list[dict], readiness: int) -> list[dict]:
    """Rule-based recommendations shown at the bottom of the report.

    Each item is ``{"level", "title", "message"}``; level is one of
    critical / warning / info / positive.
    """
    recommendations = []

    low = [s for s in stakeholders if (s.get("engagement_score") or 0) < 40]
    if low:
        recommendations.append({
            "level": "critical",
            "title": "Critical",
            "message": (
                f"{len(low)} stakeholder(s) have engagement below 40%. "
                "Prioritize direct conversations to understand their resistance."
            ),
        })

    if readiness < 50:
        recommendations.append({
            "level": "warning",
            "title": "Warning",
            "message": (
                f"Overall change readiness is low ({readiness}%). "
                "Consider slowing the pace of change until stakeholder buy-in improves."
            ),
        })

    if any(adkar_stage_for_score(s.get("engagement_score") or 0) == "Awareness" for s in stakeholders):
        recommendations.append({
            "level": "info",
            "title": "Focus Area",
            "message": (
                "Some stakeholders are still at the Awareness stage. "
                "Increase communication about why this change is necessary."
            ),
        })

    if readiness >= 60:
        recommendations.append({
            "level": "positive",
            "title": "Positive",
            "message": (
                "Change readiness is trending well. Continue current engagement "
                "strategies and prepare for the Knowledge and Ability stages."
            ),
        })

    return recommendations


def build_project_report(project_id: int) -> dict:
    """Full report payload for one project.

    Raises:
        NotFoundError: project does not exist.
    """
    project = db.session.get(Project, project_id)
    if not project:
        raise NotFoundError(resource="Project", resource_id=project_id)

    links = db.session.execute(
        select(ProjectStakeholder)
        .where(ProjectStakeholder.project_id == project_id)
        .order_by(ProjectStakeholder.created_at)
    ).scalars().all()

    stakeholders = []
    for link in links:
        history = [
            h.to_dict()
            for h in db.session.execute(
                select(ScoreHistory)
                .where(ScoreHistory.project_stakeholder_id == link.id)
                .order_by(ScoreHistory.recorded_at, ScoreHistory.id)
            ).scalars()
        ]
        row = link.to_dict()
        row["adkarStage"] = adkar_stage_for_score(link.engagement_score or 0)
        row["trend"] = engagement_trend(history)
        row["history"] = history
        stakeholders.append(row)

    readiness = change_readiness_score(stakeholders)
    analytics = aggregate_engagement(stakeholders)

    logger.info(
        "Project report built",
        extra={"project_id": project_id, "stakeholder_count": len(stakeholders)},
    )
    return {
        "project": project.to_dict(),
        "analytics": analytics,
        "readinessScore": readiness,
        "typeDistribution": type_distribution(stakeholders),
        "stakeholders": stakeholders,
        "recommendations": build_recommendations(stakeholders, readiness),
    }
