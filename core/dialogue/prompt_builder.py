"""
core.dialogue.prompt_builder

Pure functions that turn a session selection into prompt strings.

Nothing here performs I/O or raises on well-formed input: personas,
scenarios and difficulties arrive already validated as catalog options.
"""

from __future__ import annotations

from typing import Iterable

from .catalog import CatalogOption, KnowledgeSources
from .prompts import (
    PROMPT_DIALOGUE_SYSTEM,
    PROMPT_PERSONA_GENERATION,
    PROMPT_REALISTIC_CUSTOMER,
    PROMPT_SCORING,
    PROMPT_SCORING_SYSTEM,
)


SPEAKER_LABELS = {
    "en": {"trainee": "Sales", "customer": "Customer"},
    "zh": {"trainee": "销售", "customer": "顾客"},
}


def build_persona_prompt(
    persona: CatalogOption,
    scenario: CatalogOption,
    difficulty: CatalogOption,
    knowledge: KnowledgeSources,
) -> str:
    """Instruction asking the model for a persona JSON with an openingStatement."""
    return PROMPT_PERSONA_GENERATION.format(
        persona_id=persona.id,
        persona_description=persona.description,
        scenario_id=scenario.id,
        scenario_description=scenario.description,
        difficulty_id=difficulty.id,
        difficulty_description=difficulty.description,
        brand_knowledge=knowledge.brand,
        product_line_knowledge=knowledge.product_line,
        product_knowledge=knowledge.product,
    ).strip()


def build_dialogue_prompt(
    persona_details: str,
    scenario: CatalogOption,
    difficulty: CatalogOption,
    knowledge: KnowledgeSources,
) -> str:
    """System prompt for every dialogue turn; embeds the persona verbatim."""
    return PROMPT_DIALOGUE_SYSTEM.format(
        persona_details=persona_details,
        scenario_id=scenario.id,
        scenario_description=scenario.description,
        difficulty_id=difficulty.id,
        difficulty_description=difficulty.description,
        brand_knowledge=knowledge.brand,
        product_line_knowledge=knowledge.product_line,
        product_knowledge=knowledge.product,
    ).strip()


def realism_prompt() -> str:
    return PROMPT_REALISTIC_CUSTOMER.strip()


def format_transcript(history: Iterable, language: str) -> str:
    """
    Flatten turns into "speaker: text" lines, in session order.

    Speaker labels follow the session language; anything that is not the
    trainee is labelled as the customer.
    """
    labels = SPEAKER_LABELS.get(language, SPEAKER_LABELS["zh"])
    lines = []
    for turn in history:
        speaker = getattr(turn, "speaker", "customer")
        speaker = getattr(speaker, "value", speaker)
        label = labels["trainee"] if speaker == "trainee" else labels["customer"]
        lines.append(f"{label}: {turn.text}")
    return "\n".join(lines)


def build_scoring_prompt(transcript: str, topics: Iterable[str] = ()) -> str:
    """Wrap a flattened transcript with the fixed evaluation schema.

    `topics` are the brand knowledge topics the associate was expected to
    cover; the scorer reports the uncovered ones under kbInsights.missingTopics.
    """
    topic_lines = [f"- {topic}" for topic in topics]
    knowledge_topics = ""
    if topic_lines:
        knowledge_topics = "\nKnowledge topics for this brand:\n" + "\n".join(topic_lines) + "\n"
    return PROMPT_SCORING.format(
        transcript=transcript,
        knowledge_topics=knowledge_topics,
    ).strip()


def scoring_system_prompt() -> str:
    return PROMPT_SCORING_SYSTEM.strip()
