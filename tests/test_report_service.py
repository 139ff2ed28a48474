"""
Tests: report derivations and the assembled project report.
"""

import pytest

from app.core.exceptions import NotFoundError
from app.services import report_service, stakeholder_service
from app.services.report_service import (
    NOT_SET,
    adkar_stage_for_score,
    build_recommendations,
    change_readiness_score,
    engagement_trend,
    type_distribution,
)


class TestStageBucketing:
    @pytest.mark.parametrize("score,stage", [
        (0, "Awareness"),
        (19, "Awareness"),
        (20, "Desire"),
        (39, "Desire"),
        (40, "Knowledge"),
        (59, "Knowledge"),
        (60, "Ability"),
        (79, "Ability"),
        (80, "Reinforcement"),
        (100, "Reinforcement"),
    ])
    def test_thresholds(self, score, stage):
        assert adkar_stage_for_score(score) == stage


class TestEngagementTrend:
    def test_up(self):
        assert engagement_trend([{"engagement_score": 40}, {"engagement_score": 60}]) == "up"

    def test_down(self):
        assert engagement_trend([{"engagement_score": 60}, {"engagement_score": 40}]) == "down"

    def test_equal(self):
        assert engagement_trend([{"engagement_score": 50}, {"engagement_score": 50}]) == "neutral"

    def test_single_and_empty(self):
        assert engagement_trend([{"engagement_score": 50}]) == "neutral"
        assert engagement_trend([]) == "neutral"

    def test_only_last_two_count(self):
        rows = [{"engagement_score": s} for s in (90, 10, 20)]
        assert engagement_trend(rows) == "up"


class TestTypeDistribution:
    def test_tally_with_not_set(self):
        rows = [
            {"stakeholder_type": "champion"},
            {"stakeholder_type": "champion"},
            {"stakeholder_type": None},
            {"stakeholder_type": ""},
            {},
            {"stakeholder_type": "resistant"},
        ]
        assert type_distribution(rows) == {"champion": 2, NOT_SET: 3, "resistant": 1}

    def test_empty(self):
        assert type_distribution([]) == {}


class TestReadinessAndRecommendations:
    def test_readiness(self):
        rows = [
            {"engagement_score": 50, "performance_score": 70},
            {"engagement_score": 71, "performance_score": 90},
        ]
        # (60.5 + 80) / 2 = 70.25
        assert change_readiness_score(rows) == 70

    def test_readiness_empty(self):
        assert change_readiness_score([]) == 0

    def test_low_readiness_recommendations(self):
        rows = [{"engagement_score": 10, "performance_score": 20}]
        recs = build_recommendations(rows, change_readiness_score(rows))
        assert [r["level"] for r in recs] == ["critical", "warning", "info"]
        assert recs[0]["message"].startswith("1 stakeholder(s) have engagement below 40%.")
        assert "(15%)" in recs[1]["message"]

    def test_high_readiness_recommendations(self):
        rows = [{"engagement_score": 85, "performance_score": 80}]
        recs = build_recommendations(rows, change_readiness_score(rows))
        assert [r["level"] for r in recs] == ["positive"]


class TestBuildProjectReport:
    def test_missing_project(self):
        with pytest.raises(NotFoundError):
            report_service.build_project_report(424242)

    def test_report_payload(self, project, user_id):
        added = stakeholder_service.add_project_stakeholder(project["id"], {"name": "Dana", "role": "CFO"})
        link = stakeholder_service.get_project_stakeholder(user_id, added["id"])
        stakeholder_service.update_project_stakeholder(link, {"engagement_score": 65, "stakeholder_type": "champion"})

        report = report_service.build_project_report(project["id"])
        assert report["project"]["name"] == "ERP Rollout"
        assert report["typeDistribution"] == {"champion": 1}
        row = report["stakeholders"][0]
        assert row["name"] == "Dana"
        assert row["adkarStage"] == "Ability"
        assert row["trend"] == "up"
        assert [h["engagement_score"] for h in row["history"]] == [0, 65]
        assert report["analytics"]["engagementLevel"] == 65
        assert report["readinessScore"] == 33
