"""
core.dialogue.response_parser

Turns free-text model output into structured data.

Model output is never trusted: every parser here has a defined fallback and
none of them raise on malformed input.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from .models import (
    DialogueReply,
    EvaluationDimensions,
    EvaluationResult,
    Fallback,
    Parsed,
    PersonaParse,
    ReplyState,
)


logger = logging.getLogger(__name__)


# Checked in this order; the first tag found wins.
CONTROL_TAGS = (
    ("[PURCHASE]", ReplyState.PURCHASED),
    ("[LEAVE]", ReplyState.LEFT),
    ("[CONTINUE]", ReplyState.NORMAL),
)

FALLBACK_OVERALL_SCORE = 70.0
FALLBACK_DIMENSIONS = {
    "needsDiscovery": 60,
    "productKnowledge": 70,
    "objectionHandling": 65,
    "emotionalConnection": 60,
    "closingSkill": 68,
}

_OPENING_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*")
_CLOSING_FENCE_RE = re.compile(r"```$")


# -------------------------------------------------------------------
# Internal helpers
# -------------------------------------------------------------------


def _strip_code_fence(text: str) -> str:
    """Remove a leading ```lang marker and a trailing ``` marker, if present."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE_RE.sub("", cleaned)
        cleaned = _CLOSING_FENCE_RE.sub("", cleaned).strip()
    return cleaned


def _extract_json_from_text(text: str) -> str:
    """
    Normalize model text output into a raw JSON string.

    Handles Markdown fenced blocks and extra prose around the JSON object by
    extracting the outermost {...} block.
    """
    text = _strip_code_fence(text)

    if "{" in text and "}" in text:
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end != -1 and end > start:
            return text[start : end + 1].strip()

    return text


def _load_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return None


# -------------------------------------------------------------------
# Public parsers
# -------------------------------------------------------------------


def parse_persona_response(raw: str) -> PersonaParse:
    """
    Parse the persona-generation reply.

    On success the whole object is re-serialized (pretty-printed) as
    persona_details and openingStatement is extracted. On failure
    persona_details is the raw text unchanged and there is no opening
    statement; the caller supplies the per-language fallback line.
    """
    data = _load_json(_strip_code_fence(raw or ""))
    if data is None:
        logger.warning("[PARSER] Persona reply is not JSON; using raw text as persona")
        return PersonaParse(persona_details=raw, opening_statement=None, result=Fallback(raw))

    opening: Optional[str] = None
    if isinstance(data, dict):
        candidate = data.get("openingStatement")
        if isinstance(candidate, str) and candidate.strip():
            opening = candidate.strip()

    return PersonaParse(
        persona_details=json.dumps(data, ensure_ascii=False, indent=2),
        opening_statement=opening,
        result=Parsed(data),
    )


def parse_dialogue_reply(raw: str) -> DialogueReply:
    """
    Decode the control tag at the wire boundary.

    Only the first occurrence of the matched tag is removed. Replies without
    any tag are NORMAL and returned unchanged.
    """
    for tag, state in CONTROL_TAGS:
        if tag in raw:
            return DialogueReply(clean_text=raw.replace(tag, "", 1).strip(), state=state)
    return DialogueReply(clean_text=raw, state=ReplyState.NORMAL)


def fallback_evaluation(feedback: str) -> EvaluationResult:
    return EvaluationResult(
        overall_score=FALLBACK_OVERALL_SCORE,
        dimensions=EvaluationDimensions(**FALLBACK_DIMENSIONS),
        feedback=feedback,
    )


def parse_evaluation(raw: str) -> EvaluationResult:
    """
    Parse the scoring reply into an EvaluationResult.

    Anything that does not fit the schema yields the neutral fallback score
    set with the raw text as feedback, so there is always something to show.
    """
    data = _load_json(_extract_json_from_text(raw or ""))
    if isinstance(data, dict):
        try:
            return EvaluationResult.model_validate(data)
        except ValidationError as exc:
            logger.warning(
                "[PARSER] Evaluation JSON does not match the schema (%d errors)",
                exc.error_count(),
            )
    else:
        logger.warning("[PARSER] Evaluation reply is not a JSON object; using fallback scores")

    return fallback_evaluation(raw or "")
