"""HTTP API tests against an app wired to a fake generative service."""

import json

import pytest
from fastapi.testclient import TestClient

from codepilot.deps import SESSION_HEADER
from codepilot.main import create_app
from codepilot.models.editor import Language
from codepilot.services.analysis import ANALYZE_CODE_FAILURE
from codepilot.services.conversation import CHAT_FAILURE
from codepilot.services.errors import TransportError
from codepilot.services.languages import TEMPLATES
from codepilot.services.workspace import INITIAL_CODE

from .conftest import FakeGateway

SESSION = {SESSION_HEADER: "test-session"}


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(gateway, config_manager):
    app = create_app(gateway=gateway, config_manager=config_manager)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestSessions:
    def test_session_id_is_minted(self, client):
        response = client.get("/api/editor/buffer")

        assert response.headers[SESSION_HEADER]

    def test_session_id_is_echoed(self, client):
        response = client.get("/api/editor/buffer", headers=SESSION)

        assert response.headers[SESSION_HEADER] == "test-session"

    def test_sessions_do_not_share_buffers(self, client):
        client.put("/api/editor/buffer", json={"content": "mine"}, headers=SESSION)

        other = client.get("/api/editor/buffer", headers={SESSION_HEADER: "someone-else"})

        assert other.json()["content"] == INITIAL_CODE

    def test_handoff_absent_before_put(self, client):
        response = client.get("/api/session/handoff/currentCode", headers=SESSION)

        assert response.json() == {"key": "currentCode", "value": None}

    def test_end_session_drops_handoff(self, client):
        client.put("/api/editor/buffer", json={"content": "x = 1"}, headers=SESSION)

        ended = client.delete("/api/session", headers=SESSION)
        after = client.get("/api/session/handoff/currentCode", headers=SESSION)

        assert ended.json()["status"] == "ended"
        assert after.json()["value"] is None


class TestEditor:
    def test_update_buffer(self, client):
        client.put("/api/editor/buffer", json={"content": "let a = 1;"}, headers=SESSION)

        response = client.get("/api/editor/buffer", headers=SESSION)

        assert response.json() == {"content": "let a = 1;", "language": "javascript"}

    def test_change_language_and_download(self, client):
        client.put("/api/editor/language", json={"language": "go"}, headers=SESSION)

        response = client.get("/api/editor/download", headers=SESSION)

        assert response.text == TEMPLATES[Language.GO]
        assert 'filename="code.go"' in response.headers["content-disposition"]

    def test_unknown_language_is_rejected(self, client):
        response = client.put("/api/editor/language", json={"language": "cobol"}, headers=SESSION)

        assert response.status_code == 422

    def test_refresh_suggestions(self, client, gateway):
        client.put("/api/editor/buffer", json={"content": "var a;"}, headers=SESSION)

        response = client.post("/api/editor/suggestions/refresh", headers=SESSION)

        body = response.json()
        assert body["suggestions"] == ["Use const instead of let"]
        assert body["status"] == "resolved"
        assert "var a;" in gateway.prompts[-1]

    def test_pending_suggestions_after_edit(self, client):
        client.put("/api/editor/buffer", json={"content": "var b;"}, headers=SESSION)

        response = client.get("/api/editor/suggestions", headers=SESSION)

        assert response.json()["status"] == "pending"


class TestChat:
    def test_message_appends_turns(self, client, gateway):
        gateway.default = "Use a for loop:\n```js\nfor (;;) {}\n```"

        response = client.post("/api/chat/message", json={"message": "How?"}, headers=SESSION)

        turns = response.json()["turns"]
        assert [t["role"] for t in turns] == ["user", "assistant"]
        assert turns[1]["parts"][1] == {"type": "code", "content": "for (;;) {}\n", "language_hint": "js"}

    def test_blank_message_changes_nothing(self, client, gateway):
        response = client.post("/api/chat/message", json={"message": "   "}, headers=SESSION)

        assert response.json()["turns"] == []
        assert gateway.calls == 0

    def test_failure_turn(self, client, gateway):
        gateway.default = TransportError("down")

        client.post("/api/chat/message", json={"message": "Hi"}, headers=SESSION)
        turns = client.get("/api/chat/turns", headers=SESSION).json()["turns"]

        assert turns[-1]["is_error"] is True
        assert turns[-1]["parts"][0]["content"] == CHAT_FAILURE


class TestAnalysisViews:
    def test_tests_view_picks_up_editor_code(self, client):
        client.put("/api/editor/language", json={"language": "python"}, headers=SESSION)
        client.post("/api/editor/handoff", headers=SESSION)

        response = client.get("/api/tests/buffer", headers=SESSION)

        assert response.json() == {"content": TEMPLATES[Language.PYTHON], "language": "python"}

    def test_generate_and_run(self, client, gateway):
        prediction = {"passed": 1, "failed": 1, "total": 2, "coverage": "50%", "duration": "0.1s"}
        gateway._responses.extend(["```js\ntest('x', () => {});\n```", json.dumps(prediction)])
        client.put("/api/tests/buffer", json={"content": "function x() {}"}, headers=SESSION)

        generated = client.post("/api/tests/generate", headers=SESSION).json()
        ran = client.post("/api/tests/run", headers=SESSION).json()

        assert generated["record"] == "test('x', () => {});"
        assert ran["record"]["failed"] == 1
        assert ran["error"] is None

    def test_debug_banner_on_incomplete_report(self, client, gateway):
        gateway.default = json.dumps({"issues": []})
        client.put("/api/debug/buffer", json={"content": "x = 1"}, headers=SESSION)

        body = client.post("/api/debug/analyze", headers=SESSION).json()

        assert body["record"] is None
        assert body["error"] == ANALYZE_CODE_FAILURE
        assert body["status"] == "failed"

    def test_debug_report(self, client, gateway):
        gateway.default = json.dumps(
            {
                "issues": [{"type": "bug", "line": 2, "message": "off by one"}],
                "performance": {"score": 80, "suggestions": []},
                "complexity": {"score": 3, "details": "simple"},
            }
        )

        body = client.post("/api/debug/analyze", headers=SESSION).json()

        assert body["record"]["issues"] == [{"kind": "bug", "line": 2, "message": "off by one"}]
        assert body["record"]["complexity_score"] == 3

    def test_error_analysis(self, client, gateway):
        gateway.default = "Error Type: TypeError\nLikely Cause: None is not callable\nSolutions:\n- Check the call\n"

        body = client.post("/api/errors/analyze", json={"error_message": "TypeError"}, headers=SESSION).json()

        assert body["record"] == {
            "type": "TypeError",
            "cause": "None is not callable",
            "solutions": ["Check the call"],
        }


class TestConfig:
    def test_keys_are_masked(self, client):
        client.put("/api/config", json={"gemini": {"apiKey": "abcd1234efgh5678"}})

        gemini = client.get("/api/config").json()["gemini"]

        assert gemini["apiKey"] == "abcd********5678"
        assert gemini["model"] == "gemini-1.5-flash"

    def test_defaults(self, client):
        body = client.get("/api/config").json()

        assert body["gateway"] == {"timeoutSeconds": 30}
        assert body["suggestions"] == {"quietPeriodMs": 2000}


def test_headerless_requests_stay_bounded(config_manager):
    config_manager.save_config({"sessions": {"idleTimeoutSeconds": 1800, "maxSessions": 5}})
    app = create_app(gateway=FakeGateway(), config_manager=config_manager)

    with TestClient(app) as test_client:
        for _ in range(50):
            test_client.get("/api/editor/buffer")

        assert len(app.state.sessions) == 5
