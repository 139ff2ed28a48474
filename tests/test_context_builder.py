"""
Tests: cross-project context builder and prompt rendering.
"""

from app.ai.context_builder import build_cross_project_context, render_context_prompt

PROJECTS = [
    {"id": 1, "name": "CRM", "status": "completed"},
    {"id": 2, "name": "ERP", "status": "active"},
    {"id": 3, "name": "HRIS", "status": "active"},
]


def _person(pid, name, **kw):
    row = {
        "id": pid, "name": name, "email": "", "role": "", "title": "",
        "department": "", "notes": "", "org_level": None, "reports_to_id": None,
        "is_me": False, "group": None,
    }
    row.update(kw)
    return row


def _link(project_id, stakeholder_id, stype, **kw):
    row = {
        "project_id": project_id, "stakeholder_id": stakeholder_id, "stakeholder_type": stype,
        "awareness": 50, "desire": 50, "knowledge": 50, "ability": 50, "reinforcement": 50,
        "engagement_score": 40, "project_notes": "",
    }
    row.update(kw)
    return row


def _group_link(project_id, group_id, sentiment="neutral", **kw):
    row = {
        "project_id": project_id, "group_id": group_id, "group_sentiment": sentiment,
        "influence_level": 5,
        "awareness": 50, "desire": 50, "knowledge": 50, "ability": 50, "reinforcement": 50,
    }
    row.update(kw)
    return row


class TestHistories:
    def test_stakeholder_history_in_input_order(self):
        ctx = build_cross_project_context(
            PROJECTS,
            [_person(10, "Dana")],
            [_link(2, 10, "skeptic"), _link(1, 10, "neutral", project_notes="quiet")],
            [], [],
        )
        history = ctx["stakeholders"][0]["projectHistory"]
        assert [h["projectName"] for h in history] == ["ERP", "CRM"]
        assert history[1] == {
            "projectId": 1,
            "projectName": "CRM",
            "projectStatus": "completed",
            "stakeholderType": "neutral",
            "adkarScores": {"awareness": 50, "desire": 50, "knowledge": 50, "ability": 50, "reinforcement": 50},
            "engagementScore": 40,
            "notes": "quiet",
        }

    def test_unknown_project_rows_skipped(self):
        ctx = build_cross_project_context(
            PROJECTS, [_person(10, "Dana")], [_link(99, 10, "resistant")], [], [],
        )
        assert ctx["stakeholders"][0]["projectHistory"] == []

    def test_reports_to_name(self):
        ctx = build_cross_project_context(
            PROJECTS,
            [_person(1, "Boss"), _person(2, "Worker", reports_to_id=1), _person(3, "Orphan", reports_to_id=77)],
            [], [], [],
        )
        by_name = {s["name"]: s for s in ctx["stakeholders"]}
        assert by_name["Worker"]["reports_to_name"] == "Boss"
        assert by_name["Orphan"]["reports_to_name"] is None
        assert by_name["Boss"]["reports_to_name"] is None

    def test_group_member_count_and_history(self):
        group = {"id": 5, "name": "Finance", "description": "", "color": "#fff"}
        people = [
            _person(1, "A", group={"id": 5, "name": "Finance", "color": "#fff"}),
            _person(2, "B", group={"id": 5, "name": "Finance", "color": "#fff"}),
            _person(3, "C"),
        ]
        ctx = build_cross_project_context(
            PROJECTS, people, [], [_group_link(2, 5, "positive"), _group_link(2, 99)], [group],
        )
        g = ctx["groups"][0]
        assert g["memberCount"] == 2
        assert len(g["projectHistory"]) == 1
        assert g["projectHistory"][0]["sentiment"] == "positive"
        assert g["projectHistory"][0]["influenceLevel"] == 5


class TestPatterns:
    def test_single_resistant_project_no_pattern(self):
        ctx = build_cross_project_context(
            PROJECTS, [_person(10, "Dana")], [_link(1, 10, "resistant")], [], [],
        )
        assert ctx["insights"]["resistantPatterns"] == []

    def test_two_resistant_projects_named_in_order(self):
        ctx = build_cross_project_context(
            PROJECTS,
            [_person(10, "Dana")],
            [_link(1, 10, "resistant"), _link(2, 10, "skeptic")],
            [], [],
        )
        assert ctx["insights"]["resistantPatterns"] == [
            "Dana has been resistant/skeptical in 2 projects: CRM, ERP"
        ]

    def test_resistant_resistant_champion(self):
        ctx = build_cross_project_context(
            PROJECTS,
            [_person(10, "Dana")],
            [_link(1, 10, "resistant"), _link(2, 10, "resistant"), _link(3, 10, "champion")],
            [], [],
        )
        assert len(ctx["insights"]["resistantPatterns"]) == 1
        assert "in 2 projects" in ctx["insights"]["resistantPatterns"][0]
        assert ctx["insights"]["championPatterns"] == []

    def test_champion_pattern(self):
        ctx = build_cross_project_context(
            PROJECTS,
            [_person(10, "Eli")],
            [_link(1, 10, "champion"), _link(3, 10, "early_adopter")],
            [], [],
        )
        assert ctx["insights"]["championPatterns"] == [
            "Eli has been a champion/early adopter in 2 projects - consider leveraging them"
        ]

    def test_group_resistance_by_sentiment_or_low_adkar(self):
        group = {"id": 5, "name": "Ops", "description": "", "color": None}
        ctx = build_cross_project_context(
            PROJECTS, [], [],
            [_group_link(1, 5, "negative"), _group_link(2, 5, "neutral", awareness=30, desire=35)],
            [group],
        )
        assert ctx["insights"]["resistantPatterns"] == ["Ops group has shown resistance in 2 projects"]

    def test_group_low_awareness_alone_not_enough(self):
        group = {"id": 5, "name": "Ops", "description": "", "color": None}
        ctx = build_cross_project_context(
            PROJECTS, [], [],
            [_group_link(1, 5, "negative"), _group_link(2, 5, "neutral", awareness=30, desire=None)],
            [group],
        )
        assert ctx["insights"]["resistantPatterns"] == []

    def test_org_hierarchy_for_me(self):
        people = [
            _person(1, "Me", is_me=True, department="IT", reports_to_id=4),
            _person(2, "Peer", department="IT"),
            _person(3, "Report", department="Sales", reports_to_id=1),
            _person(4, "Manager", department="Exec"),
        ]
        ctx = build_cross_project_context(PROJECTS, people, [], [], [])
        assert ctx["insights"]["orgHierarchyPatterns"] == [
            "1 stakeholder(s) in your department (IT)",
            "Your direct reports: Report",
            "Your manager: Manager",
        ]
        assert ctx["insights"]["meProfile"]["name"] == "Me"

    def test_no_me_profile(self):
        ctx = build_cross_project_context(PROJECTS, [_person(1, "A")], [], [], [])
        assert ctx["insights"]["orgHierarchyPatterns"] == []
        assert ctx["insights"]["meProfile"] is None

    def test_counts(self):
        ctx = build_cross_project_context(PROJECTS, [_person(1, "A")], [], [], [])
        insights = ctx["insights"]
        assert insights["totalProjects"] == 3
        assert insights["activeProjects"] == 2
        assert insights["totalStakeholders"] == 1
        assert insights["totalGroups"] == 0

    def test_empty_input(self):
        ctx = build_cross_project_context([], [], [], [], [])
        assert ctx["stakeholders"] == []
        assert ctx["insights"]["resistantPatterns"] == []


class TestRenderContextPrompt:
    def test_includes_project_roster_and_patterns(self):
        ctx = build_cross_project_context(
            PROJECTS,
            [_person(10, "Dana"), _person(11, "Me", is_me=True, title="Change Lead")],
            [_link(1, 10, "resistant"), _link(2, 10, "resistant", engagement_score=15)],
            [], [],
        )
        text = render_context_prompt(ctx, {"id": 2, "name": "ERP", "status": "active"})
        assert "The user is Me (Change Lead)." in text
        assert "Current project: ERP (status: active)." in text
        assert "- Dana [resistant], engagement 15" in text
        assert "Resistance patterns:" in text
        assert "Champion patterns:" not in text
