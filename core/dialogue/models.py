from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field


T = TypeVar("T")


@dataclass(frozen=True)
class Parsed(Generic[T]):
    """Model output that parsed into the expected structure."""

    value: T


@dataclass(frozen=True)
class Fallback:
    """Model output that did not parse; the raw text is kept as-is."""

    raw: str


ParseResult = Union[Parsed[Any], Fallback]


class ReplyState(str, Enum):
    """Intent decoded from a customer reply's control tag."""

    NORMAL = "NORMAL"
    PURCHASED = "PURCHASED"
    LEFT = "LEFT"


@dataclass(frozen=True)
class PersonaParse:
    """
    Outcome of parsing the persona-generation reply.

    persona_details is either the pretty-printed persona JSON or, when the
    reply was not JSON, the raw reply text unchanged.
    """

    persona_details: str
    opening_statement: Optional[str]
    result: ParseResult


@dataclass(frozen=True)
class DialogueReply:
    clean_text: str
    state: ReplyState


class EvaluationDimensions(BaseModel):
    """Per-dimension rubric scores (0-100)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    needs_discovery: float = Field(alias="needsDiscovery")
    product_knowledge: float = Field(alias="productKnowledge")
    objection_handling: float = Field(alias="objectionHandling")
    emotional_connection: float = Field(alias="emotionalConnection")
    closing_skill: float = Field(alias="closingSkill")


class KnowledgeInsights(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    used_knowledge_items: List[str] = Field(default_factory=list, alias="usedKnowledgeItems")
    missing_topics: List[str] = Field(default_factory=list, alias="missingTopics")


class EvaluationResult(BaseModel):
    """
    Final rubric score for a session. Created once, when the session ends.

    Serialized with the camelCase keys the front-end expects
    (model_dump(by_alias=True)).
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    overall_score: float = Field(alias="overallScore")
    dimensions: EvaluationDimensions
    feedback: str = ""
    kb_insights: Optional[KnowledgeInsights] = Field(default=None, alias="kbInsights")
