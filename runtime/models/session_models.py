"""
Session-related models for the SaleSim runtime.

These describe:
- SessionConfig: the trainee's selection, frozen once the session starts
- Turn entries (trainee / customer)
- SessionState enum (ACTIVE, PURCHASED, LEFT, ENDED)
- Session: identity, persona, dialogue prompt, history and state
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from core.dialogue import catalog
from core.dialogue.language_policy import Language, normalize_language
from core.dialogue.models import EvaluationResult, ReplyState
from exceptions.exceptions import ConfigurationError


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_session_id() -> str:
    """Opaque, time-derived unique token."""
    return f"session_{int(time.time() * 1000)}_{uuid4().hex[:8]}"


class Speaker(str, Enum):
    TRAINEE = "trainee"
    CUSTOMER = "customer"


class SessionState(str, Enum):
    ACTIVE = "ACTIVE"
    PURCHASED = "PURCHASED"
    LEFT = "LEFT"
    ENDED = "ENDED"


# Allowed transitions; anything else is rejected by the orchestrator.
TRANSITIONS = {
    SessionState.ACTIVE: {SessionState.PURCHASED, SessionState.LEFT, SessionState.ENDED},
    SessionState.PURCHASED: {SessionState.ENDED},
    SessionState.LEFT: {SessionState.ENDED},
    SessionState.ENDED: set(),
}


class SessionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    persona_id: str
    scenario_id: str
    difficulty_id: str
    brand: str
    language: Language = "zh"

    @classmethod
    def from_selection(
        cls,
        persona: Optional[str],
        scenario: Optional[str],
        difficulty: Optional[str],
        brand: Optional[str],
        language: Optional[str] = None,
    ) -> "SessionConfig":
        """
        Resolve UI selections (canonical ids, UI keys or Chinese labels) into
        a config. Raises ConfigurationError for missing or unknown values.
        """
        if not (brand or "").strip():
            raise ConfigurationError("brand", brand)

        resolved = []
        for field_name, value, finder in (
            ("persona", persona, catalog.find_persona),
            ("scenario", scenario, catalog.find_scenario),
            ("difficulty", difficulty, catalog.find_difficulty),
        ):
            if not (value or "").strip():
                raise ConfigurationError(field_name, value)
            option = finder(value)
            if option is None:
                raise ConfigurationError(field_name, value)
            resolved.append(option.id)

        return cls(
            persona_id=resolved[0],
            scenario_id=resolved[1],
            difficulty_id=resolved[2],
            brand=brand.strip(),
            language=normalize_language(language),
        )


class Turn(BaseModel):
    model_config = ConfigDict(frozen=True)

    speaker: Speaker
    text: str
    timestamp: str = Field(default_factory=utc_now_iso)

    @property
    def transport_role(self) -> str:
        """Role name used on the chat wire."""
        return "user" if self.speaker == Speaker.TRAINEE else "assistant"


class TurnResult(BaseModel):
    reply: str
    state: ReplyState


class Session(BaseModel):
    session_id: str = Field(default_factory=new_session_id)
    config: SessionConfig
    persona_details: str
    opening_statement: str
    dialogue_system_prompt: str
    history: List[Turn] = Field(default_factory=list)
    state: SessionState = SessionState.ACTIVE
    evaluation: Optional[EvaluationResult] = None
    created_at: str = Field(default_factory=utc_now_iso)

    @property
    def language(self) -> Language:
        return self.config.language

    @property
    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE
