"""
HTTP request/response models for the SaleSim runtime API.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional

from core.dialogue.models import EvaluationResult
from .session_models import SessionConfig, SessionState, Turn


class StartSessionRequest(BaseModel):
    persona: Optional[str] = None
    scenario: Optional[str] = None
    difficulty: Optional[str] = None
    brand: Optional[str] = None
    language: Optional[str] = None


class StartSessionResponse(BaseModel):
    session_id: str
    opening_statement: str
    persona_details: str
    state: SessionState
    language: str


class TurnRequest(BaseModel):
    session_id: str
    message: str


class TurnResponse(BaseModel):
    """
    reply: the customer's reply (or a fallback / refusal line)
    state: NORMAL, PURCHASED or LEFT, decoded from the reply's control tag
    session_state: the session's state after the turn
    """
    reply: str
    state: str
    session_state: SessionState


class VoiceTurnRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str
    audio_base64: str = Field(alias="audioBase64")


class VoiceTurnResponse(BaseModel):
    transcript: str
    rejected: bool
    reason: Optional[str] = None
    reply: Optional[str] = None
    state: Optional[str] = None
    session_state: SessionState


class SessionRequest(BaseModel):
    session_id: str


class SessionView(BaseModel):
    """Read-only projection of a session for the UI."""
    session_id: str
    config: SessionConfig
    state: SessionState
    persona_details: str
    history: List[Turn]
    evaluation: Optional[EvaluationResult] = None


class ChatRelayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: Any = None
    system_prompt: Optional[str] = Field(default=None, alias="systemPrompt")
    temperature: Optional[float] = None


class TranscribeRelayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    audio_base64: str = Field(alias="audioBase64")
    language: str = "zh"

