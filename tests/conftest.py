"""Shared fixtures: a scripted fake transport and ready-made sessions."""

import json
from typing import Dict, List, Optional

import pytest

from runtime.agents.session_orchestrator import SessionOrchestrator
from runtime.models.session_models import SessionConfig
from runtime.store.session_store import SessionStore


PERSONA_JSON = json.dumps(
    {
        "name": "Lin Mei",
        "age": 34,
        "occupation": "Architect",
        "budget": "around 3,000 EUR",
        "openingStatement": "Hello, I'm looking for a bag I can take to work.",
    }
)

PERSONA_JSON_ZH = json.dumps(
    {"name": "林梅", "openingStatement": "你好，我想看看适合上班用的包。"},
    ensure_ascii=False,
)

EVALUATION_JSON = json.dumps(
    {
        "overallScore": 82,
        "dimensions": {
            "needsDiscovery": 80,
            "productKnowledge": 85,
            "objectionHandling": 78,
            "emotionalConnection": 84,
            "closingSkill": 81,
        },
        "kbInsights": {"usedKnowledgeItems": ["after-sales service"], "missingTopics": []},
        "feedback": "Good discovery questions.",
    }
)


class FakeTransport:
    """Returns scripted replies in order and records every call."""

    def __init__(self, replies: Optional[List[str]] = None, transcripts: Optional[List[str]] = None):
        self.replies = list(replies or [])
        self.transcripts = list(transcripts or [])
        self.calls: List[Dict] = []
        self.transcribe_calls: List[Dict] = []

    def chat_complete(self, messages, system_prompt=None, temperature=None) -> str:
        self.calls.append(
            {"messages": messages, "system_prompt": system_prompt, "temperature": temperature}
        )
        return self.replies.pop(0) if self.replies else ""

    def transcribe(self, audio, language) -> str:
        self.transcribe_calls.append({"audio": audio, "language": language})
        return self.transcripts.pop(0) if self.transcripts else ""


class RecordingLogStore:
    def __init__(self):
        self.events: List[tuple] = []

    def log_event(self, event_type: str, payload: dict) -> None:
        self.events.append((event_type, payload))

    def types(self) -> List[str]:
        return [event_type for event_type, _ in self.events]


@pytest.fixture
def en_config() -> SessionConfig:
    return SessionConfig.from_selection(
        persona="priceSensitive",
        scenario="firstVisit",
        difficulty="basic",
        brand="Gucci",
        language="en",
    )


@pytest.fixture
def zh_config() -> SessionConfig:
    return SessionConfig.from_selection(
        persona="价格敏感型顾客",
        scenario="首次进店",
        difficulty="基础",
        brand="Gucci",
        language="zh",
    )


@pytest.fixture
def log_store() -> RecordingLogStore:
    return RecordingLogStore()


@pytest.fixture
def make_orchestrator(log_store):
    """Build an orchestrator around a FakeTransport scripted with `replies`."""

    def _make(replies=None, transcripts=None):
        transport = FakeTransport(replies=replies, transcripts=transcripts)
        orchestrator = SessionOrchestrator(
            transport=transport,
            session_store=SessionStore(),
            log_store=log_store,
        )
        return orchestrator, transport

    return _make
