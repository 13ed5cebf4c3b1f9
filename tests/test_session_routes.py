"""HTTP-level tests for the /agent routes."""

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from runtime.agents.voice_turns import VoiceTurnHandler
from runtime.api import session_routes

from conftest import EVALUATION_JSON, PERSONA_JSON


START_BODY = {
    "persona": "priceSensitive",
    "scenario": "firstVisit",
    "difficulty": "basic",
    "brand": "Gucci",
    "language": "en",
}


@pytest.fixture
def api(make_orchestrator):
    """Return a factory: replies -> (TestClient, FakeTransport)."""

    def _make(replies=None, transcripts=None):
        orchestrator, transport = make_orchestrator(replies, transcripts)
        session_routes.init_routes(
            orchestrator=orchestrator,
            voice_handler=VoiceTurnHandler(orchestrator=orchestrator, transport=transport),
        )
        app = FastAPI()
        app.include_router(session_routes.router, prefix="/agent")
        return TestClient(app), transport

    yield _make
    session_routes.init_routes(orchestrator=None, voice_handler=None)


def start(client) -> str:
    response = client.post("/agent/start_session", json=START_BODY)
    assert response.status_code == 200
    return response.json()["session_id"]


class TestStartSession:
    def test_returns_opening_statement(self, api) -> None:
        client, _ = api([PERSONA_JSON])
        response = client.post("/agent/start_session", json=START_BODY)

        body = response.json()
        assert response.status_code == 200
        assert body["opening_statement"] == "Hello, I'm looking for a bag I can take to work."
        assert body["state"] == "ACTIVE"
        assert body["language"] == "en"
        assert body["session_id"].startswith("session_")

    def test_missing_persona_is_400_without_network(self, api) -> None:
        client, transport = api([PERSONA_JSON])
        response = client.post("/agent/start_session", json={**START_BODY, "persona": None})

        assert response.status_code == 400
        assert "persona" in response.json()["detail"]
        assert transport.calls == []

    def test_persona_failure_is_502(self, api) -> None:
        client, _ = api([""])
        response = client.post("/agent/start_session", json=START_BODY)
        assert response.status_code == 502


class TestTurn:
    def test_reply_and_state(self, api) -> None:
        client, _ = api([PERSONA_JSON, "Okay, I'll take it. [PURCHASE]"])
        session_id = start(client)

        response = client.post("/agent/turn", json={"session_id": session_id, "message": "Deal?"})

        assert response.status_code == 200
        assert response.json() == {
            "reply": "Okay, I'll take it.",
            "state": "PURCHASED",
            "session_state": "PURCHASED",
        }

    def test_turn_after_terminal_is_409(self, api) -> None:
        client, _ = api([PERSONA_JSON, "Bye. [LEAVE]"])
        session_id = start(client)
        client.post("/agent/turn", json={"session_id": session_id, "message": "Buy now!"})

        response = client.post("/agent/turn", json={"session_id": session_id, "message": "Wait"})
        assert response.status_code == 409

    def test_unknown_session_is_404(self, api) -> None:
        client, _ = api()
        response = client.post("/agent/turn", json={"session_id": "nope", "message": "Hi"})
        assert response.status_code == 404

    def test_blank_message_is_400(self, api) -> None:
        client, _ = api([PERSONA_JSON])
        session_id = start(client)
        response = client.post("/agent/turn", json={"session_id": session_id, "message": "  "})
        assert response.status_code == 400


class TestVoiceTurn:
    def test_transcript_is_sent_as_turn(self, api) -> None:
        client, transport = api([PERSONA_JSON, "Sure. [CONTINUE]"], transcripts=["Do you have it in red?"])
        session_id = start(client)

        response = client.post(
            "/agent/voice_turn", json={"session_id": session_id, "audioBase64": "QUJD"}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["transcript"] == "Do you have it in red?"
        assert body["rejected"] is False
        assert body["reply"] == "Sure."
        assert transport.transcribe_calls == [{"audio": "QUJD", "language": "en"}]

    def test_non_english_speech_is_rejected(self, api) -> None:
        client, transport = api([PERSONA_JSON], transcripts=["你好"])
        session_id = start(client)

        body = client.post(
            "/agent/voice_turn", json={"session_id": session_id, "audioBase64": "QUJD"}
        ).json()

        assert body["rejected"] is True
        assert body["reason"] == "english_only"
        assert body["reply"] is None
        assert len(transport.calls) == 1


class TestEndAndReset:
    def test_end_returns_camel_case_evaluation(self, api) -> None:
        client, _ = api([PERSONA_JSON, EVALUATION_JSON])
        session_id = start(client)

        response = client.post("/agent/end", json={"session_id": session_id})

        body = response.json()
        assert response.status_code == 200
        assert body["overallScore"] == 82
        assert body["dimensions"]["needsDiscovery"] == 80

        view = client.get(f"/agent/sessions/{session_id}").json()
        assert view["state"] == "ENDED"
        assert view["evaluation"]["overallScore"] == 82

    def test_second_end_is_409(self, api) -> None:
        client, _ = api([PERSONA_JSON, EVALUATION_JSON])
        session_id = start(client)
        client.post("/agent/end", json={"session_id": session_id})

        response = client.post("/agent/end", json={"session_id": session_id})
        assert response.status_code == 409

    def test_reset_forgets_session(self, api) -> None:
        client, _ = api([PERSONA_JSON])
        session_id = start(client)

        response = client.post("/agent/reset", json={"session_id": session_id})
        assert response.json() == {"status": "reset", "session_id": session_id}
        assert client.get(f"/agent/sessions/{session_id}").status_code == 404

    def test_session_view_lists_history(self, api) -> None:
        client, _ = api([PERSONA_JSON, "Hmm. [CONTINUE]"])
        session_id = start(client)
        client.post("/agent/turn", json={"session_id": session_id, "message": "Welcome"})

        view = client.get(f"/agent/sessions/{session_id}").json()
        assert [turn["speaker"] for turn in view["history"]] == ["customer", "trainee", "customer"]
        assert view["config"]["persona_id"] == "PRICE_SENSITIVE"


class TestUnexpectedErrors:
    def test_unexpected_error_is_logged_and_returns_500(self, api, caplog) -> None:
        client, _ = api([PERSONA_JSON])
        session_id = start(client)

        def broken_turn(session, text):
            raise RuntimeError("store offline")

        session_routes._ORCHESTRATOR.send_turn = broken_turn
        failing_client = TestClient(client.app, raise_server_exceptions=False)

        with caplog.at_level(logging.ERROR, logger=session_routes.logger.name):
            response = failing_client.post(
                "/agent/turn", json={"session_id": session_id, "message": "Hello"}
            )

        assert response.status_code == 500
        records = [r for r in caplog.records if "Unexpected error" in r.getMessage()]
        assert len(records) == 1
        assert records[0].exc_info[0] is RuntimeError

    def test_voice_turn_on_ended_session_is_409_without_transcription(self, api) -> None:
        client, transport = api([PERSONA_JSON, EVALUATION_JSON], transcripts=["Hello?"])
        session_id = start(client)
        client.post("/agent/end", json={"session_id": session_id})

        response = client.post(
            "/agent/voice_turn", json={"session_id": session_id, "audioBase64": "QUJD"}
        )

        assert response.status_code == 409
        assert transport.transcribe_calls == []


def test_healthz(api) -> None:
    client, _ = api()
    assert client.get("/agent/healthz").json() == {"status": "ok"}
