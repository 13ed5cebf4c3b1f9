"""
core.dialogue.language_policy

Language rules for a session. A session is either Chinese ("zh") or English
("en") and keeps that language for its whole lifetime.

Conformance is enforced at three points, and all three stay in place:

1. every prompt sent to the model is prefixed with a strict directive,
2. English sessions reject trainee input containing Chinese before sending,
3. English sessions replace model replies containing Chinese after receiving.
"""

from __future__ import annotations

import re
from typing import Literal, Optional


Language = Literal["zh", "en"]

ENGLISH_REFUSAL = "Please speak English."

_CJK_RE = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff]")
_PLAIN_ENGLISH_RE = re.compile(r"^[A-Za-z0-9\s.,!?'\"():;\-/%&$€£]+$")


def normalize_language(value: Optional[str]) -> Language:
    """Anything starting with "en" is English; everything else is Chinese."""
    if value and value.strip().lower().startswith("en"):
        return "en"
    return "zh"


def language_directive(lang: Language) -> str:
    if lang == "en":
        return "\n".join(
            [
                "SYSTEM LANGUAGE POLICY (STRICT):",
                "- Output must be English ONLY. Do NOT output any Chinese characters.",
                "- If the user speaks Chinese, reply: 'Please speak English.' and continue in English.",
                "- Do not translate to Chinese. Do not include bilingual content.",
                "- Keep role-play consistent: you are the customer, the user is the sales associate.",
            ]
        )
    return "\n".join(
        [
            "系统语言规则（严格）：",
            "- 输出必须为中文。",
            "- 不要输出英文或中英混合（除非品牌/型号/专有名词）。",
            "- 你扮演顾客，用户是销售。",
        ]
    )


def format_directive(lang: Language) -> str:
    if lang == "en":
        return "\n".join(
            [
                "OUTPUT FORMAT POLICY (STRICT):",
                "- Output must be valid JSON ONLY.",
                "- Use English strings only.",
                "- No markdown, no code fences, no extra text.",
            ]
        )
    return "\n".join(
        [
            "输出格式规则（严格）：",
            "- 只能输出合法 JSON。",
            "- 字符串内容使用中文。",
            "- 不要输出 markdown 或代码块，不要包含多余解释。",
        ]
    )


def with_language_directive(prompt: str, lang: Language) -> str:
    return f"{language_directive(lang)}\n\n{prompt}"


def with_format_directive(prompt: str, lang: Language) -> str:
    return f"{format_directive(lang)}\n\n{prompt}"


def contains_disallowed_script(text: str, lang: Language) -> bool:
    """True when text breaks the session's script rule (CJK in English sessions)."""
    if lang != "en" or not text:
        return False
    return _CJK_RE.search(text) is not None


def is_plain_english(text: str) -> bool:
    """
    Stricter check for transcribed speech: letters, digits, whitespace and
    common punctuation only.
    """
    return bool(text) and _PLAIN_ENGLISH_RE.match(text) is not None


def fallback_opening(lang: Language) -> str:
    if lang == "en":
        return "Hi, I'd like to take a look at your products."
    return "你好，我想看看产品。"


def fallback_customer_reply(lang: Language) -> str:
    if lang == "en":
        return "Sorry, I didn't catch that. Could you say it again?"
    return "抱歉，我这边有点忙，刚刚没有听清楚，您可以再说一遍吗？"
