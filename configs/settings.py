from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


def _float_env(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


class Settings:
    """
    Central configuration for SaleSim.

    Values are loaded once from environment variables (with sensible defaults)
    and then exposed via typed properties.
    """

    def __init__(self) -> None:
        # Transport adapter: where the orchestrator sends chat / ASR requests
        self._chat_endpoint = os.getenv(
            "SALESIM_CHAT_ENDPOINT", "http://127.0.0.1:8000/api/chat"
        )
        self._transcribe_endpoint = os.getenv(
            "SALESIM_TRANSCRIBE_ENDPOINT", "http://127.0.0.1:8000/api/transcribe"
        )
        self._transport_timeout = _float_env("SALESIM_TRANSPORT_TIMEOUT", 60.0)
        self._dialogue_temperature = _float_env("SALESIM_DIALOGUE_TEMPERATURE", None)

        # Session behaviour
        self._end_grace_seconds = _float_env("SALESIM_END_GRACE_SECONDS", 1.0)
        self._default_brand = os.getenv("SALESIM_DEFAULT_BRAND", "Gucci")

        # Runtime data paths (both optional)
        runtime_dir = os.getenv("SALESIM_RUNTIME_DATA_DIR")
        self._runtime_data_dir = Path(runtime_dir) if runtime_dir else None
        event_dir = os.getenv("SALESIM_EVENT_LOG_DIR")
        self._event_log_dir = Path(event_dir) if event_dir else None

        # Relay upstream (OpenAI-compatible chat completions, Kimi by default)
        self._llm_api_key = (
            os.getenv("LLM_API_KEY")
            or os.getenv("KIMI_API_KEY")
            or os.getenv("OPENAI_API_KEY")
        )
        self._llm_base_url = os.getenv("LLM_BASE_URL", "https://api.moonshot.cn/v1")
        self._llm_model = os.getenv("LLM_MODEL", "moonshot-v1-128k")
        self._llm_temperature = _float_env("LLM_TEMPERATURE", 0.8)

        # Relay upstream for speech recognition (defaults to the LLM key)
        self._asr_api_key = os.getenv("ASR_API_KEY") or self._llm_api_key
        self._asr_base_url = os.getenv("ASR_BASE_URL") or None
        self._asr_model = os.getenv("ASR_MODEL", "whisper-1")

    # ------------------------------------------------------------------
    # Transport settings
    # ------------------------------------------------------------------

    @property
    def chat_endpoint(self) -> str:
        return self._chat_endpoint

    @property
    def transcribe_endpoint(self) -> str:
        return self._transcribe_endpoint

    @property
    def transport_timeout(self) -> float:
        return self._transport_timeout

    @property
    def dialogue_temperature(self) -> Optional[float]:
        return self._dialogue_temperature

    # ------------------------------------------------------------------
    # Session settings
    # ------------------------------------------------------------------

    @property
    def end_grace_seconds(self) -> float:
        return self._end_grace_seconds

    @property
    def default_brand(self) -> str:
        return self._default_brand

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    @property
    def runtime_data_dir(self) -> Optional[Path]:
        return self._runtime_data_dir

    @property
    def event_log_dir(self) -> Optional[Path]:
        return self._event_log_dir

    # ------------------------------------------------------------------
    # Relay upstream settings
    # ------------------------------------------------------------------

    @property
    def llm_api_key(self) -> str:
        if not self._llm_api_key:
            raise RuntimeError(
                "LLM_API_KEY is not set. Please export it in your environment "
                "or define it in a .env file (KIMI_API_KEY and OPENAI_API_KEY "
                "are accepted as well)."
            )
        return self._llm_api_key

    @property
    def llm_base_url(self) -> Optional[str]:
        return self._llm_base_url

    @property
    def llm_model(self) -> str:
        return self._llm_model

    @property
    def llm_temperature(self) -> float:
        return self._llm_temperature

    @property
    def asr_api_key(self) -> str:
        if not self._asr_api_key:
            raise RuntimeError(
                "ASR_API_KEY is not set and no LLM_API_KEY is available to fall "
                "back on. Please export one of them or define it in a .env file."
            )
        return self._asr_api_key

    @property
    def asr_base_url(self) -> Optional[str]:
        return self._asr_base_url

    @property
    def asr_model(self) -> str:
        return self._asr_model


settings = Settings()
