"""Voice turns: recorded audio -> transcript -> dialogue turn -> spoken reply.

The recording and speech-output collaborators live outside this package
(browser MediaRecorder / SpeechSynthesis in the web client). They are only
described here as protocols:

    Recorder.start()          begin capturing, dropping any previous buffer
    Recorder.stop() -> str    finish capturing, release the device, return
                              base64 audio
    Speaker.speak(text)       fire-and-forget speech output

Speech output always uses SPEECH_LOCALE, whatever the session language.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from core.dialogue.language_policy import is_plain_english
from exceptions.exceptions import SessionNotActiveError
from ..models.session_models import Session, TurnResult


logger = logging.getLogger(__name__)

SPEECH_LOCALE = "zh-CN"


class Recorder(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> str:
        ...


class Speaker(Protocol):
    def speak(self, text: str) -> None:
        ...


@dataclass
class VoiceTurnOutcome:
    """Result of a voice turn.

    rejected is True when the transcript was not sent to the customer:
    reason is then "empty" (nothing recognised) or "english_only" (an
    English session received non-English speech).
    """

    transcript: str
    rejected: bool = False
    reason: Optional[str] = None
    result: Optional[TurnResult] = None


class VoiceTurnHandler:
    """Glue between the transcription endpoint and SessionOrchestrator.

    Parameters
    ----------
    orchestrator:
        SessionOrchestrator used to send the recognised text.
    transport:
        Object exposing transcribe(audio, language) -> str. Raises
        TranscriptionError on failure; that error is not caught here.
    speaker:
        Optional speech-output collaborator for the customer reply.
    """

    def __init__(self, orchestrator, transport, speaker: Optional[Speaker] = None) -> None:
        self.orchestrator = orchestrator
        self.transport = transport
        self.speaker = speaker

    def record_turn(self, session: Session, recorder: Recorder) -> VoiceTurnOutcome:
        """Stop an in-progress recording and submit it as the trainee's turn."""
        return self.submit_audio(session, recorder.stop())

    def submit_audio(self, session: Session, audio: Union[bytes, str]) -> VoiceTurnOutcome:
        """Transcribe `audio` and send it as a turn.

        Raises SessionNotActiveError before any transcription when the
        session no longer accepts turns.
        """
        if not session.is_active:
            raise SessionNotActiveError(session.session_id, session.state)

        lang = session.language
        transcript = (self.transport.transcribe(audio, lang) or "").strip()

        if not transcript:
            logger.info("[VOICE] Empty transcript for %s; nothing sent", session.session_id)
            return VoiceTurnOutcome(transcript="", rejected=True, reason="empty")

        if lang == "en" and not is_plain_english(transcript):
            logger.info(
                "[VOICE] Non-English transcript in English session %s; nothing sent",
                session.session_id,
            )
            return VoiceTurnOutcome(transcript=transcript, rejected=True, reason="english_only")

        result = self.orchestrator.send_turn(session, transcript)
        if result is not None and self.speaker is not None:
            self.speaker.speak(result.reply)

        return VoiceTurnOutcome(transcript=transcript, result=result)
