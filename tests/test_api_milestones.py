"""
Tests: milestone API.

Covers:
    - Create with required fields and enum validation
    - Listing ordered by date
    - Update/delete through the milestone's project owner
"""

import pytest


def _milestone(client, project, headers, **kw):
    payload = {"name": "Kick-off", "date": "2025-03-01", "type": "kickoff"}
    payload.update(kw)
    return client.post(f"/api/v1/projects/{project['id']}/milestones", json=payload, headers=headers)


class TestMilestoneAPI:
    def test_create_defaults_to_upcoming(self, client, project, auth_headers):
        res = _milestone(client, project, auth_headers)
        assert res.status_code == 201
        body = res.get_json()
        assert body["status"] == "upcoming"
        assert body["date"] == "2025-03-01"
        assert body["type"] == "kickoff"

    def test_missing_fields(self, client, project, auth_headers):
        res = client.post(
            f"/api/v1/projects/{project['id']}/milestones", json={"name": "Only a name"}, headers=auth_headers
        )
        assert res.status_code == 400
        body = res.get_json()
        assert body["error"] == "Missing required fields"
        assert body["details"] == {"date": "required", "type": "required"}

    @pytest.mark.parametrize("field,value", [("type", "party"), ("status", "late")])
    def test_invalid_enum(self, client, project, auth_headers, field, value):
        res = _milestone(client, project, auth_headers, **{field: value})
        assert res.status_code == 400
        assert res.get_json()["details"] == {field: "invalid"}

    def test_list_ordered_by_date(self, client, project, auth_headers):
        _milestone(client, project, auth_headers, name="Go-live", date="2025-09-01", type="golive")
        _milestone(client, project, auth_headers, name="Training", date="2025-06-15", type="training")
        _milestone(client, project, auth_headers)

        res = client.get(f"/api/v1/projects/{project['id']}/milestones", headers=auth_headers)
        assert res.status_code == 200
        assert [m["name"] for m in res.get_json()] == ["Kick-off", "Training", "Go-live"]

    def test_update(self, client, project, auth_headers):
        milestone = _milestone(client, project, auth_headers).get_json()
        res = client.patch(
            f"/api/v1/milestones/{milestone['id']}",
            json={"status": "completed", "meeting_notes": "Went well"},
            headers=auth_headers,
        )
        assert res.status_code == 200
        assert res.get_json()["status"] == "completed"
        assert res.get_json()["meeting_notes"] == "Went well"

    def test_update_bad_date(self, client, project, auth_headers):
        milestone = _milestone(client, project, auth_headers).get_json()
        res = client.patch(f"/api/v1/milestones/{milestone['id']}", json={"date": "soon"}, headers=auth_headers)
        assert res.status_code == 400

    def test_foreign_and_missing(self, client, project, auth_headers, other_headers):
        milestone = _milestone(client, project, auth_headers).get_json()
        assert client.patch(
            f"/api/v1/milestones/{milestone['id']}", json={"name": "X"}, headers=other_headers
        ).status_code == 403
        assert client.delete(f"/api/v1/milestones/{milestone['id']}", headers=other_headers).status_code == 403
        assert client.delete("/api/v1/milestones/999", headers=auth_headers).status_code == 404

    def test_delete(self, client, project, auth_headers):
        milestone = _milestone(client, project, auth_headers).get_json()
        assert client.delete(f"/api/v1/milestones/{milestone['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/v1/projects/{project['id']}/milestones", headers=auth_headers).get_json() == []
