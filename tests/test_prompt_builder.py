"""Tests for prompt construction and the option catalog."""

import pytest

from core.dialogue import catalog
from core.dialogue.prompt_builder import (
    build_dialogue_prompt,
    build_persona_prompt,
    build_scoring_prompt,
    format_transcript,
    realism_prompt,
)
from runtime.models.session_models import SessionConfig, Speaker, Turn
from exceptions.exceptions import ConfigurationError


@pytest.fixture
def selection():
    return (
        catalog.find_persona("priceSensitive"),
        catalog.find_scenario("firstVisit"),
        catalog.find_difficulty("basic"),
        catalog.knowledge_for_brand("Gucci"),
    )


class TestPersonaPrompt:
    def test_is_deterministic(self, selection) -> None:
        assert build_persona_prompt(*selection) == build_persona_prompt(*selection)

    def test_substitutes_selection_verbatim(self, selection) -> None:
        prompt = build_persona_prompt(*selection)
        assert "PRICE_SENSITIVE" in prompt
        assert "FIRST_VISIT" in prompt
        assert "BASIC" in prompt
        assert selection[0].description in prompt
        assert selection[1].description in prompt

    def test_requests_opening_statement_json(self, selection) -> None:
        prompt = build_persona_prompt(*selection)
        assert "openingStatement" in prompt
        assert "JSON" in prompt
        assert "{{" not in prompt

    def test_embeds_brand_knowledge(self, selection) -> None:
        assert "Brand: Gucci" in build_persona_prompt(*selection)


class TestDialoguePrompt:
    def test_embeds_persona_verbatim(self, selection) -> None:
        persona_details = '{\n  "name": "Lin Mei",\n  "budget": "{not a placeholder}"\n}'
        _, scenario, difficulty, knowledge = selection
        prompt = build_dialogue_prompt(persona_details, scenario, difficulty, knowledge)
        assert persona_details in prompt

    def test_lists_all_control_tags(self, selection) -> None:
        _, scenario, difficulty, knowledge = selection
        prompt = build_dialogue_prompt("persona", scenario, difficulty, knowledge)
        for tag in ("[PURCHASE]", "[LEAVE]", "[CONTINUE]"):
            assert tag in prompt

    def test_realism_prompt_keeps_tag_convention(self) -> None:
        assert "[CONTINUE]" in realism_prompt()


class TestScoringPrompt:
    def test_transcript_labels_follow_language(self) -> None:
        history = [
            Turn(speaker=Speaker.CUSTOMER, text="Hello."),
            Turn(speaker=Speaker.TRAINEE, text="Welcome!"),
        ]
        assert format_transcript(history, "en") == "Customer: Hello.\nSales: Welcome!"
        assert format_transcript(history, "zh") == "顾客: Hello.\n销售: Welcome!"

    def test_wraps_transcript_with_schema(self) -> None:
        prompt = build_scoring_prompt("Sales: Hi\nCustomer: Hello")
        assert "Sales: Hi\nCustomer: Hello" in prompt
        for key in ("overallScore", "needsDiscovery", "closingSkill", "feedback"):
            assert key in prompt

    def test_lists_knowledge_topics_for_missing_topics(self) -> None:
        prompt = build_scoring_prompt("Sales: Hi", catalog.knowledge_for_brand("Gucci").topics)
        assert "Knowledge topics for this brand:" in prompt
        assert "- personalisation" in prompt
        assert "missingTopics" in prompt

    def test_topics_section_is_omitted_when_empty(self) -> None:
        assert "Knowledge topics" not in build_scoring_prompt("Sales: Hi")


class TestCatalog:
    @pytest.mark.parametrize("alias", ["PRICE_SENSITIVE", "priceSensitive", "价格敏感型顾客", "pricesensitive"])
    def test_persona_aliases_resolve(self, alias) -> None:
        assert catalog.find_persona(alias).id == "PRICE_SENSITIVE"

    def test_unknown_option_is_none(self) -> None:
        assert catalog.find_scenario("moon base") is None
        assert catalog.find_difficulty(None) is None

    def test_config_from_ui_labels(self) -> None:
        config = SessionConfig.from_selection("高净值顾客", "VIP 回访", "高级", "LV", "en-US")
        assert (config.persona_id, config.scenario_id, config.difficulty_id) == (
            "HNWI",
            "VIP_RETURN",
            "ADVANCED",
        )
        assert config.language == "en"

    def test_language_defaults_to_chinese(self) -> None:
        config = SessionConfig.from_selection("gift", "dutyFree", "intermediate", "Gucci")
        assert config.language == "zh"

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            (dict(persona="", scenario="firstVisit", difficulty="basic", brand="Gucci"), "persona"),
            (dict(persona="gift", scenario=None, difficulty="basic", brand="Gucci"), "scenario"),
            (dict(persona="gift", scenario="firstVisit", difficulty="expert", brand="Gucci"), "difficulty"),
            (dict(persona="gift", scenario="firstVisit", difficulty="basic", brand="  "), "brand"),
        ],
    )
    def test_missing_or_unknown_selection_is_rejected(self, kwargs, field) -> None:
        with pytest.raises(ConfigurationError) as excinfo:
            SessionConfig.from_selection(**kwargs)
        assert excinfo.value.field == field

    def test_config_is_immutable(self) -> None:
        config = SessionConfig.from_selection("gift", "dutyFree", "basic", "Gucci", "zh")
        with pytest.raises(Exception):
            config.language = "en"
