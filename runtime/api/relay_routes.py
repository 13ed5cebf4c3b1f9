"""Relay routes: the thin reverse proxy the transport adapter talks to.

- POST /api/chat        {messages, systemPrompt?, temperature?}
                        -> upstream chat completion body
- POST /api/transcribe  {audioBase64, language} -> {text}

Upstream credentials never leave the server. Failures are reported as
{"error": ...} with HTTP 500 so the transport adapter can fall back.
"""

import base64
import binascii
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from openai import OpenAIError

from core.api import openai_client
from ..models.api_models import ChatRelayRequest, TranscribeRelayRequest


logger = logging.getLogger(__name__)

router = APIRouter()


def merge_system_prompt(
    messages: List[Dict[str, Any]], system_prompt: Optional[str]
) -> List[Dict[str, Any]]:
    """
    Insert the extra system prompt right after the leading system messages,
    so it sits between the dialogue instructions and the conversation.
    """
    if not system_prompt:
        return list(messages)

    idx = 0
    while idx < len(messages) and isinstance(messages[idx], dict) and messages[idx].get("role") == "system":
        idx += 1
    return [*messages[:idx], {"role": "system", "content": system_prompt}, *messages[idx:]]


@router.post("/chat")
def relay_chat(request: ChatRelayRequest):
    if not isinstance(request.messages, list):
        return JSONResponse(status_code=400, content={"error": "messages must be a list"})

    messages = merge_system_prompt(request.messages, request.system_prompt)

    try:
        completion = openai_client.create_chat_completion(
            messages,
            temperature=request.temperature,
        )
    except (OpenAIError, RuntimeError) as exc:
        logger.error("[RELAY] Upstream chat completion failed: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "upstream chat completion failed", "detail": str(exc)},
        )

    return completion


@router.post("/transcribe")
def relay_transcribe(request: TranscribeRelayRequest):
    encoded = request.audio_base64
    if "," in encoded:
        encoded = encoded.split(",", 1)[1]

    try:
        audio = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return JSONResponse(status_code=400, content={"error": "audioBase64 is not valid base64"})

    if not audio:
        return JSONResponse(status_code=400, content={"error": "No audio data provided"})

    language = "en" if request.language == "en" else "zh"
    logger.info("[RELAY] Transcribing %d bytes of audio (language=%s)", len(audio), language)

    try:
        text = openai_client.transcribe_audio(audio, language=language)
    except (OpenAIError, RuntimeError) as exc:
        logger.error("[RELAY] Upstream transcription failed: %s", exc)
        return JSONResponse(status_code=500, content={"error": str(exc)})

    return {"text": text}
