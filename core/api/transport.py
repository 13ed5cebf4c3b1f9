"""
core.api.transport

The only place the orchestration side talks to the network.

Two calls:
  - chat_complete: POST {messages, systemPrompt?, temperature?} to the chat
    endpoint and return the reply content. Fails soft: any non-success path
    (non-2xx, bad JSON, "error" field, missing content, timeout) returns "".
  - transcribe: POST {audioBase64, language} to the transcription endpoint.
    Fails hard with TranscriptionError; there is no fallback text.

No retries: a failed call falls back (or raises) exactly once.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from configs.settings import settings
from exceptions.exceptions import TranscriptionError, TransportContractError


logger = logging.getLogger(__name__)

VALID_ROLES = frozenset({"system", "user", "assistant"})


def _validate_messages(messages: Any) -> List[Dict[str, str]]:
    if not isinstance(messages, list) or not messages:
        raise TransportContractError("messages must be a non-empty list")

    for idx, message in enumerate(messages):
        if not isinstance(message, dict):
            raise TransportContractError(f"message #{idx} is not a mapping")
        role = message.get("role")
        content = message.get("content")
        if role not in VALID_ROLES:
            raise TransportContractError(f"message #{idx} has invalid role {role!r}")
        if not isinstance(content, str):
            raise TransportContractError(f"message #{idx} content must be a string")
    return messages


def _encode_audio(audio: Union[bytes, str]) -> str:
    """Return pure base64 text, accepting raw bytes or (data-URL) base64 text."""
    if isinstance(audio, (bytes, bytearray)):
        return base64.b64encode(bytes(audio)).decode("ascii")
    if isinstance(audio, str):
        return audio.split(",", 1)[1] if "," in audio else audio
    raise TypeError("audio must be bytes or base64 text")


class TransportAdapter:
    """
    HTTP client for the chat and transcription endpoints.

    Parameters
    ----------
    chat_url / transcribe_url:
        Endpoint URLs; default to the configured relay.
    timeout:
        Per-request timeout in seconds. A timeout is handled exactly like any
        other failed response.
    client:
        Optional pre-built httpx.Client (tests inject one with a
        MockTransport).
    """

    def __init__(
        self,
        chat_url: Optional[str] = None,
        transcribe_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.chat_url = chat_url or settings.chat_endpoint
        self.transcribe_url = transcribe_url or settings.transcribe_endpoint
        self.timeout = timeout if timeout is not None else settings.transport_timeout
        self._client = client or httpx.Client(timeout=self.timeout)

    def close(self) -> None:
        self._client.close()

    # ------------------------------------------------------------------
    # Chat completions
    # ------------------------------------------------------------------

    def chat_complete(
        self,
        messages: List[Dict[str, str]],
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Send a message list and return the reply content, or "" on failure.

        Raises
        ------
        TransportContractError
            If `messages` is not a list of {role, content} mappings.
        """
        payload: Dict[str, Any] = {"messages": _validate_messages(messages)}
        if system_prompt:
            payload["systemPrompt"] = system_prompt
        if temperature is not None:
            payload["temperature"] = temperature

        try:
            response = self._client.post(self.chat_url, json=payload, timeout=self.timeout)
        except httpx.TimeoutException:
            logger.error("[TRANSPORT] Chat request timed out after %.1fs", self.timeout)
            return ""
        except httpx.HTTPError as exc:
            logger.error("[TRANSPORT] Chat request failed: %s", exc)
            return ""

        if not response.is_success:
            logger.error(
                "[TRANSPORT] Chat endpoint returned HTTP %s: %s",
                response.status_code,
                response.text[:500],
            )
            return ""

        try:
            result = response.json()
        except ValueError as exc:
            logger.error("[TRANSPORT] Chat endpoint returned invalid JSON: %s", exc)
            return ""

        if not isinstance(result, dict):
            logger.error("[TRANSPORT] Chat endpoint returned a non-object body")
            return ""

        if result.get("error"):
            logger.error("[TRANSPORT] Chat endpoint reported an error: %s", result["error"])
            return ""

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if not isinstance(content, str) or not content.strip():
            logger.error("[TRANSPORT] Chat endpoint returned no content")
            return ""

        return content.strip()

    # ------------------------------------------------------------------
    # Transcription
    # ------------------------------------------------------------------

    def transcribe(self, audio: Union[bytes, str], language: str) -> str:
        """
        Forward audio to the recognition backend and return its text.

        Raises
        ------
        TranscriptionError
            On any transport, HTTP or body failure.
        """
        payload = {
            "audioBase64": _encode_audio(audio),
            "language": "en" if language == "en" else "zh",
        }

        try:
            response = self._client.post(self.transcribe_url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.error("[TRANSPORT] Transcription request failed: %s", exc)
            raise TranscriptionError(str(exc)) from exc

        if not response.is_success:
            logger.error(
                "[TRANSPORT] Transcription endpoint returned HTTP %s: %s",
                response.status_code,
                response.text[:500],
            )
            raise TranscriptionError(response.text[:500], status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise TranscriptionError(f"invalid JSON body: {exc}") from exc

        if not isinstance(data, dict):
            raise TranscriptionError("response body is not an object")

        text = data.get("text")
        return text if isinstance(text, str) else ""
