"""
Tests: chat history and insight log API.

Covers:
    - Message append, oldest-first listing with limit, per-project clear
    - Insight append, newest-first listing with filters, delete
"""


def _message(client, headers, content, role="user", project_id=None):
    res = client.post(
        "/api/v1/chat-messages",
        json={"role": role, "content": content, "project_id": project_id},
        headers=headers,
    )
    assert res.status_code == 201
    return res.get_json()


class TestChatMessages:
    def test_listing_is_oldest_first(self, client, auth_headers):
        for i in range(3):
            _message(client, auth_headers, f"m{i}", role="user" if i % 2 == 0 else "assistant")

        res = client.get("/api/v1/chat-messages", headers=auth_headers)
        assert res.status_code == 200
        rows = res.get_json()
        assert [m["content"] for m in rows] == ["m0", "m1", "m2"]
        assert [m["role"] for m in rows] == ["user", "assistant", "user"]

    def test_limit_keeps_most_recent(self, client, auth_headers):
        for i in range(5):
            _message(client, auth_headers, f"m{i}")
        res = client.get("/api/v1/chat-messages?limit=2", headers=auth_headers)
        assert [m["content"] for m in res.get_json()] == ["m3", "m4"]

    def test_project_filter(self, client, project, auth_headers):
        _message(client, auth_headers, "general")
        _message(client, auth_headers, "scoped", project_id=project["id"])
        res = client.get(f"/api/v1/chat-messages?project_id={project['id']}", headers=auth_headers)
        assert [m["content"] for m in res.get_json()] == ["scoped"]

    def test_invalid_role(self, client, auth_headers):
        res = client.post(
            "/api/v1/chat-messages", json={"role": "system", "content": "x"}, headers=auth_headers
        )
        assert res.status_code == 400

    def test_content_required(self, client, auth_headers):
        res = client.post("/api/v1/chat-messages", json={"role": "user"}, headers=auth_headers)
        assert res.status_code == 400

    def test_clear_for_project_only(self, client, project, auth_headers):
        _message(client, auth_headers, "general")
        _message(client, auth_headers, "scoped", project_id=project["id"])

        res = client.delete(f"/api/v1/chat-messages?project_id={project['id']}", headers=auth_headers)
        assert res.status_code == 200
        assert res.get_json() == {"success": True, "deleted": 1}
        remaining = client.get("/api/v1/chat-messages", headers=auth_headers).get_json()
        assert [m["content"] for m in remaining] == ["general"]

    def test_clear_all_leaves_other_users(self, client, auth_headers, other_headers):
        _message(client, auth_headers, "mine")
        _message(client, other_headers, "theirs")
        res = client.delete("/api/v1/chat-messages", headers=auth_headers)
        assert res.get_json()["deleted"] == 1
        assert len(client.get("/api/v1/chat-messages", headers=other_headers).get_json()) == 1


class TestChatInsights:
    def test_save_and_list_newest_first(self, client, auth_headers):
        for text in ("first", "second"):
            res = client.post("/api/v1/chat-insights", json={"insight": text}, headers=auth_headers)
            assert res.status_code == 201
        rows = client.get("/api/v1/chat-insights", headers=auth_headers).get_json()
        assert [r["insight"] for r in rows] == ["second", "first"]
        assert rows[0]["insight_type"] == "general"

    def test_filter_by_stakeholder(self, client, auth_headers):
        person = client.post(
            "/api/v1/global-stakeholders", json={"name": "Dana"}, headers=auth_headers
        ).get_json()
        client.post(
            "/api/v1/chat-insights",
            json={"insight": "Dana fears job loss", "stakeholder_id": person["id"], "insight_type": "concern"},
            headers=auth_headers,
        )
        client.post("/api/v1/chat-insights", json={"insight": "Unrelated"}, headers=auth_headers)

        rows = client.get(
            f"/api/v1/chat-insights?stakeholder_id={person['id']}", headers=auth_headers
        ).get_json()
        assert [(r["insight"], r["insight_type"]) for r in rows] == [("Dana fears job loss", "concern")]

    def test_insight_required(self, client, auth_headers):
        assert client.post("/api/v1/chat-insights", json={"insight": " "}, headers=auth_headers).status_code == 400

    def test_delete(self, client, auth_headers, other_headers):
        insight = client.post(
            "/api/v1/chat-insights", json={"insight": "x"}, headers=auth_headers
        ).get_json()
        assert client.delete(f"/api/v1/chat-insights/{insight['id']}", headers=other_headers).status_code == 404
        assert client.delete(f"/api/v1/chat-insights/{insight['id']}", headers=auth_headers).status_code == 200
        assert client.get("/api/v1/chat-insights", headers=auth_headers).get_json() == []
