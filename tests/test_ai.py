"""
Tests: AI layer.

Covers:
    - cost calculation
    - LLM Gateway (LocalStubProvider, provider fallback, usage logging, failures)
    - ConversationStarterAssistant (prompt, parsing, error paths)
    - ChatAssistant (transcript persistence, history in prompt, error path)
    - AI Blueprint endpoints
"""

import pytest

from app.ai.assistants import ChatAssistant, ConversationStarterAssistant
from app.ai.assistants.chat import CHAT_ERROR
from app.ai.assistants.conversation_starters import GENERATION_ERROR, build_starter_prompt
from app.ai.gateway import LLMGateway, LocalStubProvider
from app.ai.starter_parser import parse_starters
from app.models import db
from app.models.ai import AIUsageLog, calculate_cost
from app.models.coaching import ChatMessage
from app.services import stakeholder_service


class _FailingProvider:
    def chat(self, messages, model, **kwargs):
        raise RuntimeError("upstream 529 overloaded")


class _FailingGateway:
    def chat(self, messages, **kwargs):
        raise RuntimeError("boom")


class _RecordingGateway:
    def __init__(self, answer="Noted."):
        self.answer = answer
        self.calls = []

    def chat(self, messages, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        return {"content": self.answer}


@pytest.fixture()
def gateway(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    return LLMGateway(default_model="local-stub")


@pytest.fixture()
def link(project):
    return stakeholder_service.add_project_stakeholder(
        project["id"], {"name": "Dana", "role": "CFO"}
    )


# ═════════════════════════════════════════════════════════════════════════════
# COST + GATEWAY
# ═════════════════════════════════════════════════════════════════════════════


class TestCostCalculation:
    def test_haiku(self):
        assert calculate_cost("claude-3-5-haiku-20241022", 1_000_000, 1_000_000) == pytest.approx(6.0)

    def test_unknown_model_is_free(self):
        assert calculate_cost("local-stub", 500, 500) == 0.0


class TestLLMGateway:
    def test_local_stub_chat(self, gateway):
        result = gateway.chat([{"role": "user", "content": "Any advice?"}], purpose="chat", user_id="u1")
        assert result["provider"] == "local"
        assert result["model"] == "local-stub"
        assert result["content"].startswith("Focus on")
        assert result["cost_usd"] == 0.0

    def test_usage_logged(self, gateway, project):
        gateway.chat(
            [{"role": "user", "content": "Hi"}],
            purpose="chat", user_id="u1", project_id=project["id"],
        )
        db.session.commit()
        log = db.session.query(AIUsageLog).one()
        assert log.success is True
        assert log.purpose == "chat"
        assert log.project_id == project["id"]
        assert log.total_tokens == log.prompt_tokens + log.completion_tokens

    def test_missing_provider_falls_back_to_stub(self, gateway):
        result = gateway.chat([{"role": "user", "content": "Hi"}], model="gpt-4o")
        assert result["provider"] == "local"

    def test_failure_logged_and_reraised(self, gateway):
        gateway._providers["local"] = _FailingProvider()
        with pytest.raises(RuntimeError):
            gateway.chat([{"role": "user", "content": "Hi"}], purpose="chat")
        db.session.commit()
        log = db.session.query(AIUsageLog).one()
        assert log.success is False
        assert "overloaded" in log.error_message

    def test_stub_answers_starter_prompts_with_numbered_list(self):
        content = LocalStubProvider._generate_stub_response("Give me 5 specific conversation starters")
        assert len(parse_starters(content)) == 5


# ═════════════════════════════════════════════════════════════════════════════
# ASSISTANTS
# ═════════════════════════════════════════════════════════════════════════════


class TestConversationStarterAssistant:
    def test_prompt_defaults(self):
        prompt = build_starter_prompt({"name": "Dana", "role": "CFO", "stakeholder_type": "skeptic"})
        assert "Dana (CFO, Skeptic type)" in prompt
        assert "Awareness 50" in prompt
        assert "Notes about them: No notes yet" in prompt

    def test_generate_with_stub(self, gateway, link, user_id):
        result = ConversationStarterAssistant(gateway=gateway).generate(link["id"], user_id=user_id)
        assert result["error"] is None
        assert result["stakeholder"]["name"] == "Dana"
        assert [s["number"] for s in result["starters"]] == [1, 2, 3, 4, 5]
        assert [s["suggestedTag"] for s in result["starters"]] == [
            "opener", "objection", "question", "empathy", "question",
        ]
        assert result["starters"][2]["explanation"] == "Invites them to describe impact in their own words."

        log = db.session.query(AIUsageLog).one()
        assert log.purpose == "conversation_starters"
        assert log.user_id == user_id

    def test_prompt_carries_project_context(self, link):
        gw = _RecordingGateway('1. "Hello" - Simple.')
        result = ConversationStarterAssistant(gateway=gw).generate(link["id"])
        system = gw.calls[0]["messages"][0]["content"]
        assert "Project: ERP Rollout" in system
        assert "Overall engagement: 0%" in system
        assert [s["phrase"] for s in result["starters"]] == ["Hello"]

    def test_unnumbered_reply_gives_no_starters(self, link):
        gw = _RecordingGateway("Just talk to them.")
        result = ConversationStarterAssistant(gateway=gw).generate(link["id"])
        assert result["starters"] == []
        assert result["raw_response"] == "Just talk to them."

    def test_missing_link(self, gateway):
        result = ConversationStarterAssistant(gateway=gateway).generate(987654)
        assert result["error"] == "Stakeholder not found"

    def test_no_gateway(self, link):
        result = ConversationStarterAssistant(gateway=None).generate(link["id"])
        assert result["error"] == "LLM Gateway not available"

    def test_llm_failure(self, link):
        result = ConversationStarterAssistant(gateway=_FailingGateway()).generate(link["id"])
        assert result["error"] == GENERATION_ERROR
        assert result["raw_response"] == GENERATION_ERROR
        assert result["starters"] == []


class TestChatAssistant:
    def test_persists_question_and_answer(self, gateway, user_id, project):
        result = ChatAssistant(gateway=gateway).ask(user_id, "Who should I talk to first?", project_id=project["id"])
        assert result["error"] is None
        rows = db.session.query(ChatMessage).order_by(ChatMessage.id).all()
        assert [(m.role, m.project_id) for m in rows] == [
            ("user", project["id"]),
            ("assistant", project["id"]),
        ]
        assert rows[1].content == result["response"]

    def test_history_sent_with_next_question(self, user_id):
        gw = _RecordingGateway("Answer")
        assistant = ChatAssistant(gateway=gw)
        assistant.ask(user_id, "First?")
        assistant.ask(user_id, "Second?")

        roles = [m["role"] for m in gw.calls[1]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]
        assert gw.calls[1]["messages"][-1]["content"] == "Second?"
        assert gw.calls[1]["purpose"] == "chat"

    def test_history_limit(self, user_id):
        gw = _RecordingGateway("Answer")
        assistant = ChatAssistant(gateway=gw, history_limit=2)
        for i in range(3):
            assistant.ask(user_id, f"Q{i}")
        assert len(gw.calls[2]["messages"]) == 4

    def test_system_prompt_names_current_project(self, user_id, project):
        stakeholder_service.add_project_stakeholder(project["id"], {"name": "Dana"})
        gw = _RecordingGateway()
        ChatAssistant(gateway=gw).ask(user_id, "Status?", project_id=project["id"])
        system = gw.calls[0]["messages"][0]["content"]
        assert "Current project: ERP Rollout (status: active)." in system
        assert "- Dana [neutral], engagement 0" in system

    def test_llm_failure_keeps_question(self, user_id):
        result = ChatAssistant(gateway=_FailingGateway()).ask(user_id, "Hello?")
        assert result == {"response": CHAT_ERROR, "error": CHAT_ERROR}
        assert [m.role for m in db.session.query(ChatMessage).all()] == ["user"]

    def test_blank_question(self, gateway, user_id):
        assert ChatAssistant(gateway=gateway).ask(user_id, "   ")["error"] == "question is required"


# ═════════════════════════════════════════════════════════════════════════════
# AI BLUEPRINT
# ═════════════════════════════════════════════════════════════════════════════


class TestAIEndpoints:
    def test_conversation_starters(self, client, link, auth_headers):
        res = client.post(
            "/api/v1/ai/conversation-starters",
            json={"project_stakeholder_id": link["id"]},
            headers=auth_headers,
        )
        assert res.status_code == 200
        body = res.get_json()
        assert len(body["starters"]) == 5
        assert body["stakeholder"]["id"] == link["id"]

    def test_starters_require_id(self, client, auth_headers):
        res = client.post("/api/v1/ai/conversation-starters", json={}, headers=auth_headers)
        assert res.status_code == 400

    def test_starters_foreign_and_missing(self, client, link, other_headers, auth_headers):
        res = client.post(
            "/api/v1/ai/conversation-starters", json={"stakeholder_id": link["id"]}, headers=other_headers
        )
        assert res.status_code == 403
        res = client.post(
            "/api/v1/ai/conversation-starters", json={"stakeholder_id": 5555}, headers=auth_headers
        )
        assert res.status_code == 404

    def test_chat(self, client, project, auth_headers):
        res = client.post(
            "/api/v1/ai/chat",
            json={"question": "Where do I start?", "project_id": project["id"]},
            headers=auth_headers,
        )
        assert res.status_code == 200
        assert res.get_json()["response"].startswith("Focus on")
        history = client.get(
            f"/api/v1/chat-messages?project_id={project['id']}", headers=auth_headers
        ).get_json()
        assert [m["role"] for m in history] == ["user", "assistant"]

    def test_chat_message_alias_and_validation(self, client, auth_headers):
        assert client.post("/api/v1/ai/chat", json={"message": "Hi"}, headers=auth_headers).status_code == 200
        assert client.post("/api/v1/ai/chat", json={"question": ""}, headers=auth_headers).status_code == 400

    def test_chat_foreign_project(self, client, other_project, auth_headers):
        res = client.post(
            "/api/v1/ai/chat",
            json={"question": "Hi", "project_id": other_project["id"]},
            headers=auth_headers,
        )
        assert res.status_code == 403

    def test_chat_failure_is_422(self, client, app, auth_headers, monkeypatch):
        monkeypatch.setattr(app, "_ai_chat", ChatAssistant(gateway=_FailingGateway()), raising=False)
        res = client.post("/api/v1/ai/chat", json={"question": "Hi"}, headers=auth_headers)
        assert res.status_code == 422
        assert res.get_json()["error"] == CHAT_ERROR

    def test_requires_auth(self, client):
        assert client.post("/api/v1/ai/chat", json={"question": "Hi"}).status_code == 401
