"""
Tests: analytics, report and AI context endpoints.
"""


def _link(client, project, headers, name, **scores):
    link = client.post(
        f"/api/v1/projects/{project['id']}/stakeholders", json={"name": name}, headers=headers
    ).get_json()
    if scores:
        link = client.patch(
            f"/api/v1/project-stakeholders/{link['id']}", json=scores, headers=headers
        ).get_json()
    return link


class TestAnalyticsEndpoint:
    def test_requires_project_id(self, client, auth_headers):
        res = client.get("/api/v1/analytics", headers=auth_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "project_id required"

    def test_foreign_project(self, client, other_project, auth_headers):
        res = client.get(f"/api/v1/analytics?project_id={other_project['id']}", headers=auth_headers)
        assert res.status_code == 403

    def test_engagement_and_risk(self, client, project, auth_headers):
        _link(client, project, auth_headers, "Ana", engagement_score=40)
        _link(client, project, auth_headers, "Ben", engagement_score=81)

        res = client.get(f"/api/v1/analytics?project_id={project['id']}", headers=auth_headers)
        assert res.status_code == 200
        body = res.get_json()
        assert body["engagementLevel"] == 61
        assert body["riskAssessment"] == 39
        assert body["breakdown"] == [
            {"name": "Ana", "engagement": 40, "performance": 0},
            {"name": "Ben", "engagement": 81, "performance": 0},
        ]

    def test_empty_project(self, client, project, auth_headers):
        body = client.get(f"/api/v1/analytics?project_id={project['id']}", headers=auth_headers).get_json()
        assert body == {"engagementLevel": 0, "riskAssessment": 0, "breakdown": []}


class TestReportEndpoint:
    def test_report(self, client, project, auth_headers):
        _link(client, project, auth_headers, "Ana", engagement_score=90, stakeholder_type="champion")
        _link(client, project, auth_headers, "Ben", engagement_score=10, stakeholder_type="resistant")

        res = client.get(f"/api/v1/projects/{project['id']}/report", headers=auth_headers)
        assert res.status_code == 200
        body = res.get_json()
        assert body["project"]["id"] == project["id"]
        assert body["typeDistribution"] == {"champion": 1, "resistant": 1}
        assert [s["trend"] for s in body["stakeholders"]] == ["up", "up"]
        assert body["analytics"]["engagementLevel"] == 50
        assert isinstance(body["recommendations"], list)

    def test_report_forbidden(self, client, other_project, auth_headers):
        assert client.get(f"/api/v1/projects/{other_project['id']}/report", headers=auth_headers).status_code == 403


class TestAIContextEndpoint:
    def test_context_shape(self, client, project, auth_headers):
        group = client.post("/api/v1/groups", json={"name": "Finance"}, headers=auth_headers).get_json()
        me = client.post(
            "/api/v1/global-stakeholders",
            json={"name": "Me Myself", "is_me": True, "department": "IT"},
            headers=auth_headers,
        ).get_json()
        client.post(
            "/api/v1/global-stakeholders",
            json={"name": "Peer", "department": "IT", "group_id": group["id"]},
            headers=auth_headers,
        )
        _link(client, project, auth_headers, "Linked")

        res = client.get("/api/v1/ai-context", headers=auth_headers)
        assert res.status_code == 200
        body = res.get_json()
        insights = body["insights"]
        assert insights["totalProjects"] == 1
        assert insights["activeProjects"] == 1
        assert insights["totalStakeholders"] == 3
        assert insights["totalGroups"] == 1
        assert insights["meProfile"]["id"] == me["id"]

        by_name = {s["name"]: s for s in body["stakeholders"]}
        assert by_name["Peer"]["group"]["name"] == "Finance"
        assert [h["projectName"] for h in by_name["Linked"]["projectHistory"]] == ["ERP Rollout"]
        assert body["groups"][0]["memberCount"] == 1

    def test_context_is_per_user(self, client, other_project, auth_headers):
        body = client.get("/api/v1/ai-context", headers=auth_headers).get_json()
        assert body["projects"] == []
        assert body["insights"]["totalProjects"] == 0
