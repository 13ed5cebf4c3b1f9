"""
core.api.openai_client

Thin wrapper around an OpenAI-compatible API for the SaleSim relay.

Used by:
  - runtime/api/relay_routes.py (/api/chat and /api/transcribe)

Chat completions go to the configured LLM upstream (Moonshot/Kimi by
default); transcriptions go to the ASR upstream (OpenAI Whisper by default).
Clients are created lazily so that importing this module never requires an
API key.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from openai import OpenAI

from configs.settings import settings


# -------------------------------------------------------------------
# Client + config
# -------------------------------------------------------------------

_chat_client: Optional[OpenAI] = None
_asr_client: Optional[OpenAI] = None


def get_chat_client() -> OpenAI:
    """Return the shared chat client, creating it on first use."""
    global _chat_client
    if _chat_client is None:
        _chat_client = OpenAI(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
        )
    return _chat_client


def get_asr_client() -> OpenAI:
    """Return the shared transcription client, creating it on first use."""
    global _asr_client
    if _asr_client is None:
        _asr_client = OpenAI(
            api_key=settings.asr_api_key,
            base_url=settings.asr_base_url,
        )
    return _asr_client


# -------------------------------------------------------------------
# Public functions
# -------------------------------------------------------------------


def create_chat_completion(
    messages: List[Dict[str, Any]],
    *,
    temperature: Optional[float] = None,
    model: Optional[str] = None,
    client: Optional[OpenAI] = None,
) -> Dict[str, Any]:
    """
    Forward a message list to the upstream chat completions API.

    Returns
    -------
    dict
        The completion body as a plain dict, i.e.
        {"choices": [{"message": {"content": ...}}], ...}.

    Raises
    ------
    OpenAIError
        If the API call fails.
    """
    completion = (client or get_chat_client()).chat.completions.create(
        model=model or settings.llm_model,
        messages=messages,
        temperature=settings.llm_temperature if temperature is None else temperature,
    )
    return completion.model_dump()


def transcribe_audio(
    audio: bytes,
    *,
    language: str,
    filename: str = "audio.webm",
    model: Optional[str] = None,
    client: Optional[OpenAI] = None,
) -> str:
    """
    Send recorded audio to the upstream transcription API and return its text.

    Raises
    ------
    OpenAIError
        If the API call fails.
    """
    transcription = (client or get_asr_client()).audio.transcriptions.create(
        model=model or settings.asr_model,
        file=(filename, audio),
        language=language,
    )
    return (getattr(transcription, "text", "") or "").strip()
