"""Tests for voice turns: transcript gating and spoken replies."""

import pytest

from exceptions.exceptions import SessionNotActiveError, TranscriptionError
from runtime.agents.voice_turns import VoiceTurnHandler

from conftest import PERSONA_JSON, PERSONA_JSON_ZH


class RecordingSpeaker:
    def __init__(self):
        self.spoken = []

    def speak(self, text: str) -> None:
        self.spoken.append(text)


class FakeRecorder:
    def __init__(self, audio: str):
        self.audio = audio
        self.stopped = False

    def start(self) -> None:
        pass

    def stop(self) -> str:
        self.stopped = True
        return self.audio


def make_handler(make_orchestrator, replies, transcripts):
    orchestrator, transport = make_orchestrator(replies, transcripts)
    speaker = RecordingSpeaker()
    handler = VoiceTurnHandler(orchestrator=orchestrator, transport=transport, speaker=speaker)
    return handler, orchestrator, transport, speaker


class TestSubmitAudio:
    def test_english_transcript_becomes_turn_and_is_spoken(self, make_orchestrator, en_config) -> None:
        handler, orchestrator, transport, speaker = make_handler(
            make_orchestrator, [PERSONA_JSON, "It is 2,100 euros. [CONTINUE]"], ["How much is it?"]
        )
        session = orchestrator.start_session(en_config)

        outcome = handler.submit_audio(session, b"audio")

        assert outcome.rejected is False
        assert outcome.transcript == "How much is it?"
        assert outcome.result.reply == "It is 2,100 euros."
        assert speaker.spoken == ["It is 2,100 euros."]
        assert transport.transcribe_calls[0]["language"] == "en"
        assert session.history[-2].text == "How much is it?"

    def test_empty_transcript_is_rejected(self, make_orchestrator, en_config) -> None:
        handler, orchestrator, transport, speaker = make_handler(make_orchestrator, [PERSONA_JSON], ["   "])
        session = orchestrator.start_session(en_config)

        outcome = handler.submit_audio(session, b"audio")

        assert outcome.rejected is True
        assert outcome.reason == "empty"
        assert len(session.history) == 1
        assert speaker.spoken == []

    @pytest.mark.parametrize("transcript", ["你好", "Hola, ¿qué tal?"])
    def test_non_english_speech_in_english_session_is_rejected(
        self, make_orchestrator, en_config, transcript
    ) -> None:
        handler, orchestrator, transport, _ = make_handler(make_orchestrator, [PERSONA_JSON], [transcript])
        session = orchestrator.start_session(en_config)

        outcome = handler.submit_audio(session, b"audio")

        assert outcome.rejected is True
        assert outcome.reason == "english_only"
        assert outcome.transcript == transcript
        assert len(transport.calls) == 1
        assert len(session.history) == 1

    def test_chinese_session_accepts_chinese_speech(self, make_orchestrator, zh_config) -> None:
        handler, orchestrator, transport, speaker = make_handler(
            make_orchestrator, [PERSONA_JSON_ZH, "可以试背一下吗？[CONTINUE]"], ["这款有黑色吗"]
        )
        session = orchestrator.start_session(zh_config)

        outcome = handler.submit_audio(session, "data:audio/webm;base64,QUJD")

        assert outcome.rejected is False
        assert speaker.spoken == ["可以试背一下吗？"]
        assert transport.transcribe_calls[0] == {"audio": "data:audio/webm;base64,QUJD", "language": "zh"}

    def test_transcription_error_propagates(self, make_orchestrator, en_config) -> None:
        handler, orchestrator, transport, _ = make_handler(make_orchestrator, [PERSONA_JSON], [])
        session = orchestrator.start_session(en_config)

        def failing(audio, language):
            raise TranscriptionError("asr down", status_code=500)

        transport.transcribe = failing
        with pytest.raises(TranscriptionError):
            handler.submit_audio(session, b"audio")
        assert len(session.history) == 1

    @pytest.mark.parametrize("terminal_reply", ["Deal. [PURCHASE]", "Bye. [LEAVE]"])
    def test_inactive_session_is_rejected_before_transcription(
        self, make_orchestrator, en_config, terminal_reply
    ) -> None:
        handler, orchestrator, transport, speaker = make_handler(
            make_orchestrator, [PERSONA_JSON, terminal_reply], ["Are you still there?"]
        )
        session = orchestrator.start_session(en_config)
        orchestrator.send_turn(session, "Hello")

        with pytest.raises(SessionNotActiveError):
            handler.submit_audio(session, b"audio")
        assert transport.transcribe_calls == []
        assert speaker.spoken == []


def test_record_turn_stops_recorder(make_orchestrator, en_config) -> None:
    handler, orchestrator, transport, _ = make_handler(
        make_orchestrator, [PERSONA_JSON, "Sure. [CONTINUE]"], ["Can I see it?"]
    )
    session = orchestrator.start_session(en_config)
    recorder = FakeRecorder("QUJD")

    outcome = handler.record_turn(session, recorder)

    assert recorder.stopped
    assert transport.transcribe_calls[0]["audio"] == "QUJD"
    assert outcome.result.reply == "Sure."
