"""Tests for the HTTP API."""

import json
from types import MappingProxyType

import pytest
from fastapi.testclient import TestClient

from codepolish_core.errors import MissingCredentialsError, RateLimitError
from codepolish_core.providers.base import BaseReviewer
from codepolish_server.app import create_app
from codepolish_store.errors import InternalError
from codepolish_store.sqlite import SQLiteStore

VALID_RESULT = {
    "detectedLanguage": "javascript",
    "issues": [],
    "optimizedCode": "const f = () => {};",
    "explanation": "Looks fine.",
    "documentation": "## f",
    "overallScore": 9,
    "detailedScores": {
        "quality": 9,
        "readability": 9,
        "optimization": 9,
        "security": 10,
        "technicalDebt": 9,
        "styleConsistency": 9,
    },
    "complexity": {"time": "O(1)", "space": "O(1)", "cyclomatic": 1},
}


class _FakeReviewer(BaseReviewer):
    DEFAULT_MODEL = "fake"
    MODEL_ALIASES = MappingProxyType({})

    def __init__(self, payload=json.dumps(VALID_RESULT), error=None):
        self.payload = payload
        self.error = error
        self.prompts = []
        self.chats = []

    def _call_api(self, model, prompt, schema):
        if self.error:
            raise self.error
        self.prompts.append(prompt)
        return self.payload

    def _call_chat(self, model, system_instruction, transcript, question):
        self.chats.append((transcript, question))
        return f"answer to {question}"


@pytest.fixture
def config(tmp_path):
    return {
        "provider": "gemini",
        "model": "gemini-3-flash-preview",
        "store_path": str(tmp_path / "history.db"),
        "history_limit": 100,
        "house_style": None,
        "static_dir": None,
        "gemini_api_key": "key",
    }


@pytest.fixture
def store(config):
    s = SQLiteStore(db_path=config["store_path"])
    yield s
    s.close()


@pytest.fixture
def reviewer():
    return _FakeReviewer()


@pytest.fixture
def client(config, store, reviewer):
    app = create_app(config, store=store, reviewer_factory=lambda cfg: reviewer)
    with TestClient(app) as c:
        yield c


# ---------------------------------------------------------------------------
# /api/history
# ---------------------------------------------------------------------------


class TestHistoryApi:
    def test_save_then_repeat_then_new_pair(self, client, store):
        body = {"originalCode": "function f(){}", "improvedCode": "function f(){}"}

        first = client.post("/api/history", json=body)
        assert first.status_code == 200
        assert first.json() == {"success": True, "inserted": True}

        repeat = client.post("/api/history", json=body)
        assert repeat.json() == {"success": True, "inserted": False}
        assert store.count() == 1

        other = client.post("/api/history", json={**body, "improvedCode": "const f=()=>{};"})
        assert other.json()["inserted"] is True
        assert store.count() == 2

    @pytest.mark.parametrize(
        "body",
        [
            {"improvedCode": "x"},
            {"originalCode": "x"},
            {"originalCode": "", "improvedCode": "x"},
            {"originalCode": "x", "improvedCode": ""},
        ],
    )
    def test_missing_fields_return_400(self, client, store, body):
        response = client.post("/api/history", json=body)
        assert response.status_code == 400
        assert "error" in response.json()
        assert store.count() == 0

    def test_non_json_body_returns_400(self, client):
        response = client.post("/api/history", content=b"not json", headers={"content-type": "application/json"})
        assert response.status_code == 400

    def test_complexity_and_language_stored(self, client):
        client.post(
            "/api/history",
            json={
                "originalCode": "a",
                "improvedCode": "b",
                "language": "python",
                "complexity": {"time": "O(n)", "space": "O(1)", "cyclomatic": 3},
            },
        )
        (record,) = client.get("/api/history").json()
        assert record["language"] == "python"
        assert record["timeComplexity"] == "O(n)"
        assert record["spaceComplexity"] == "O(1)"
        assert record["cyclomaticComplexity"] == 3

    def test_partial_complexity_uses_defaults(self, client):
        client.post("/api/history", json={"originalCode": "a", "improvedCode": "b", "complexity": {"time": "O(n)"}})
        (record,) = client.get("/api/history").json()
        assert record["spaceComplexity"] == "unknown"
        assert record["cyclomaticComplexity"] == 0

    def test_empty_history(self, client):
        response = client.get("/api/history")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_newest_first_and_capped(self, client, store):
        for i in range(102):
            store.record("orig", f"v{i}")

        records = client.get("/api/history").json()
        assert len(records) == 100
        assert records[0]["improvedCode"] == "v101"
        stamps = [r["timestamp"] for r in records]
        assert stamps == sorted(stamps, reverse=True)

    def test_storage_fault_on_save_returns_500(self, client, store, mocker):
        mocker.patch.object(store, "record", side_effect=InternalError("Failed to save history"))
        response = client.post("/api/history", json={"originalCode": "a", "improvedCode": "b"})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to save history"}

    def test_storage_fault_on_read_returns_500(self, client, store, mocker):
        mocker.patch.object(store, "list_history", side_effect=InternalError("Failed to read history"))
        response = client.get("/api/history")
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to read history"}


# ---------------------------------------------------------------------------
# /api/review and /api/chat
# ---------------------------------------------------------------------------


class TestReviewApi:
    def test_returns_camel_case_result(self, client):
        response = client.post("/api/review", json={"code": "function f(){}", "mode": "interview"})
        assert response.status_code == 200
        data = response.json()
        assert data["detectedLanguage"] == "javascript"
        assert data["detailedScores"]["technicalDebt"] == 9

    def test_options_reach_the_prompt(self, client, reviewer):
        client.post(
            "/api/review",
            json={"code": "x", "language": "python", "targetLanguage": "go", "errorLog": "KeyError: 'a'"},
        )
        prompt = reviewer.prompts[0]
        assert "TARGET LANGUAGE FOR CONVERSION: go" in prompt
        assert "KeyError: 'a'" in prompt

    def test_configured_house_style_used_as_default(self, config, store, reviewer, tmp_path):
        style = tmp_path / "style.md"
        style.write_text("Always use snake_case.")
        config["house_style"] = str(style)
        app = create_app(config, store=store, reviewer_factory=lambda cfg: reviewer)

        with TestClient(app) as c:
            c.post("/api/review", json={"code": "x"})

        assert "Always use snake_case." in reviewer.prompts[0]

    def test_missing_code_returns_400(self, client):
        assert client.post("/api/review", json={"mode": "student"}).status_code == 400

    def test_unknown_mode_returns_400(self, client):
        response = client.post("/api/review", json={"code": "x", "mode": "expert"})
        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_malformed_payload_returns_502(self, config, store):
        app = create_app(config, store=store, reviewer_factory=lambda cfg: _FakeReviewer(payload='{"issues": []}'))
        with TestClient(app) as c:
            response = c.post("/api/review", json={"code": "x"})
        assert response.status_code == 502
        assert response.json()["kind"] == "malformed_response"

    def test_rate_limit_returns_429(self, config, store):
        app = create_app(
            config, store=store, reviewer_factory=lambda cfg: _FakeReviewer(error=RateLimitError("slow down"))
        )
        with TestClient(app) as c:
            response = c.post("/api/review", json={"code": "x"})
        assert response.status_code == 429
        assert response.json()["error"] == "slow down"

    def test_missing_credentials(self, config, store):
        def factory(cfg):
            raise MissingCredentialsError("GEMINI_API_KEY is not set")

        app = create_app(config, store=store, reviewer_factory=factory)
        with TestClient(app) as c:
            response = c.post("/api/review", json={"code": "x"})
        assert response.status_code == 500
        assert response.json() == {"error": "GEMINI_API_KEY is not set", "kind": "missing_credentials"}


class TestChatApi:
    def test_answer_and_transcript(self, client, reviewer):
        history = [{"role": "user", "text": "q1"}, {"role": "model", "parts": [{"text": "a1"}]}]
        response = client.post("/api/chat", json={"code": "x", "question": "q2", "history": history})

        assert response.status_code == 200
        assert response.json() == {"answer": "answer to q2"}
        transcript, question = reviewer.chats[0]
        assert [(m.role, m.text) for m in transcript] == [("user", "q1"), ("model", "a1")]

    def test_bad_role_returns_400(self, client):
        response = client.post(
            "/api/chat", json={"code": "x", "question": "q", "history": [{"role": "system", "text": "hi"}]}
        )
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "message",
        [
            {"role": "user", "parts": ["hi"]},
            {"role": "user", "parts": [{"text": 5}]},
            {"role": "user", "text": 5},
            "hi",
        ],
    )
    def test_malformed_history_returns_400_json(self, client, reviewer, message):
        response = client.post("/api/chat", json={"code": "x", "question": "q", "history": [message]})

        assert response.status_code == 400
        assert "error" in response.json()
        assert reviewer.chats == []


VALID_REFACTOR = {
    "explanation": "Moved the helper into utils.py.",
    "dependencyGraph": "- app.py -> utils.py",
    "modifiedFiles": [{"name": "utils.py", "content": "def helper(): ...\n"}],
}


class TestRefactorApi:
    @pytest.fixture
    def refactor_client(self, config, store):
        reviewer = _FakeReviewer(payload=json.dumps(VALID_REFACTOR))
        app = create_app(config, store=store, reviewer_factory=lambda cfg: reviewer)
        with TestClient(app) as c:
            yield c, reviewer

    def test_returns_modified_files(self, refactor_client):
        client, reviewer = refactor_client
        response = client.post(
            "/api/refactor",
            json={"intent": "extract helper", "files": [{"name": "app.py", "content": "def helper(): ...\n"}]},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["dependencyGraph"] == "- app.py -> utils.py"
        assert data["modifiedFiles"] == [{"name": "utils.py", "content": "def helper(): ...\n"}]
        assert "--- FILE: app.py ---" in reviewer.prompts[0]
        assert "extract helper" in reviewer.prompts[0]

    def test_missing_files_returns_400(self, refactor_client):
        client, _ = refactor_client
        assert client.post("/api/refactor", json={"intent": "x"}).status_code == 400

    def test_empty_file_list_returns_400(self, refactor_client):
        client, reviewer = refactor_client
        response = client.post("/api/refactor", json={"intent": "x", "files": []})
        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"
        assert reviewer.prompts == []

    def test_malformed_payload_returns_502(self, client):
        # The default fake answers with a review payload, which is not a refactor result.
        response = client.post("/api/refactor", json={"intent": "x", "files": [{"name": "a.py", "content": ""}]})
        assert response.status_code == 502
        assert response.json()["kind"] == "malformed_response"


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_static_dir_served(config, store, tmp_path):
    ui = tmp_path / "dist"
    ui.mkdir()
    (ui / "index.html").write_text("<html>codepolish</html>")
    config["static_dir"] = str(ui)

    with TestClient(create_app(config, store=store)) as c:
        assert "codepolish" in c.get("/").text
        assert c.get("/api/health").status_code == 200
