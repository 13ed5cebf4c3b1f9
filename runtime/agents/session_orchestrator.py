"""SessionOrchestrator implementation.

Responsible for:
- starting a session: generate the customer persona and opening line,
  build the dialogue system prompt
- exchanging turns: enforce the session language, call the model, decode
  the control tag, append trainee + customer turns
- ending a session: score the transcript and freeze the evaluation
- resetting a session: forget it

State machine:

    ACTIVE -> PURCHASED -> ENDED
    ACTIVE -> LEFT      -> ENDED
    ACTIVE -> ENDED                (trainee ends early)

Transitions are monotonic. When a turn comes back PURCHASED or LEFT the
caller schedules end_session (optionally after a short grace delay).

Turn-level failures never reach the trainee as exceptions: an empty
transport reply becomes a localized fallback line and a language violation
becomes the fixed refusal line. Only persona generation failures and
state/config violations are raised.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from core.dialogue import catalog
from core.dialogue.language_policy import (
    ENGLISH_REFUSAL,
    contains_disallowed_script,
    fallback_customer_reply,
    fallback_opening,
    with_format_directive,
    with_language_directive,
)
from core.dialogue.models import EvaluationResult, ReplyState
from core.dialogue.prompt_builder import (
    build_dialogue_prompt,
    build_persona_prompt,
    build_scoring_prompt,
    format_transcript,
    realism_prompt,
    scoring_system_prompt,
)
from core.dialogue.response_parser import (
    parse_dialogue_reply,
    parse_evaluation,
    parse_persona_response,
)
from exceptions.exceptions import (
    ConfigurationError,
    PersonaGenerationError,
    SessionAlreadyEndedError,
    SessionNotActiveError,
    SessionNotFoundError,
    TurnInProgressError,
)
from ..models.session_models import (
    TRANSITIONS,
    Session,
    SessionConfig,
    SessionState,
    Speaker,
    Turn,
    TurnResult,
)


logger = logging.getLogger(__name__)

_TERMINAL_REPLY_STATES = {
    ReplyState.PURCHASED: SessionState.PURCHASED,
    ReplyState.LEFT: SessionState.LEFT,
}


class SessionOrchestrator:
    """Session lifecycle + dialogue logic for SaleSim.

    Parameters
    ----------
    transport:
        Object exposing chat_complete(messages, system_prompt=None,
        temperature=None) -> str. It must fail soft (return "") on network
        errors.
    session_store:
        Store used to persist Session objects.
    log_store:
        Optional event sink exposing log_event(event_type, payload).
    dialogue_temperature:
        Optional temperature forwarded on dialogue turns.
    """

    def __init__(
        self,
        transport,
        session_store,
        log_store=None,
        dialogue_temperature: Optional[float] = None,
    ) -> None:
        self.transport = transport
        self.session_store = session_store
        self.log_store = log_store
        self.dialogue_temperature = dialogue_temperature

        # One in-flight mutation per session.
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def start_session(self, config: SessionConfig) -> Session:
        """Generate the persona and opening line and return an ACTIVE session.

        Raises
        ------
        ConfigurationError
            If the config names an unknown persona, scenario or difficulty.
        PersonaGenerationError
            If the transport returns no content for the persona prompt.
        """
        persona = catalog.find_persona(config.persona_id)
        scenario = catalog.find_scenario(config.scenario_id)
        difficulty = catalog.find_difficulty(config.difficulty_id)
        if persona is None:
            raise ConfigurationError("persona", config.persona_id)
        if scenario is None:
            raise ConfigurationError("scenario", config.scenario_id)
        if difficulty is None:
            raise ConfigurationError("difficulty", config.difficulty_id)

        lang = config.language
        knowledge = catalog.knowledge_for_brand(config.brand)

        persona_prompt = build_persona_prompt(persona, scenario, difficulty, knowledge)
        raw_persona = self.transport.chat_complete(
            [{"role": "system", "content": with_language_directive(persona_prompt, lang)}]
        )
        if not raw_persona:
            logger.error(
                "[SESSION] Persona generation returned no content (persona=%s scenario=%s)",
                persona.id,
                scenario.id,
            )
            raise PersonaGenerationError(lang)

        parsed = parse_persona_response(raw_persona)
        opening = parsed.opening_statement
        if not opening or contains_disallowed_script(opening, lang):
            opening = fallback_opening(lang)

        dialogue_prompt = build_dialogue_prompt(
            parsed.persona_details, scenario, difficulty, knowledge
        )

        session = Session(
            config=config,
            persona_details=parsed.persona_details,
            opening_statement=opening,
            dialogue_system_prompt=with_language_directive(dialogue_prompt, lang),
            history=[Turn(speaker=Speaker.CUSTOMER, text=opening)],
        )
        self.session_store.save_session(session)

        logger.info(
            "[SESSION] Started %s (persona=%s scenario=%s difficulty=%s lang=%s)",
            session.session_id,
            persona.id,
            scenario.id,
            difficulty.id,
            lang,
        )
        self._log_event(
            "session_started",
            {
                "session_id": session.session_id,
                "config": config.model_dump(),
                "persona_parsed": parsed.opening_statement is not None,
            },
        )
        return session

    def send_turn(self, session: Session, trainee_text: str) -> Optional[TurnResult]:
        """Exchange one trainee utterance for one customer reply.

        Returns None (and changes nothing) when the text is blank.

        Raises
        ------
        SessionNotActiveError
            If the session is PURCHASED, LEFT or ENDED.
        TurnInProgressError
            If another turn or end is in flight for this session.
        """
        with self._exclusive(session.session_id):
            if session.state != SessionState.ACTIVE:
                raise SessionNotActiveError(session.session_id, session.state)

            text = (trainee_text or "").strip()
            if not text:
                return None

            lang = session.language

            if contains_disallowed_script(text, lang):
                # Known-bad input: answer locally, skip the round trip.
                reply, state = ENGLISH_REFUSAL, ReplyState.NORMAL
                self._log_event(
                    "language_refusal",
                    {"session_id": session.session_id, "stage": "pre_send"},
                )
            else:
                reply, state = self._exchange(session, text)

            session.history.append(Turn(speaker=Speaker.TRAINEE, text=text))
            session.history.append(Turn(speaker=Speaker.CUSTOMER, text=reply))

            terminal = _TERMINAL_REPLY_STATES.get(state)
            if terminal is not None:
                self._transition(session, terminal)
                self._log_event(
                    "session_terminal",
                    {"session_id": session.session_id, "state": terminal.value},
                )

            self.session_store.save_session(session)
            self._log_event(
                "turn_completed",
                {
                    "session_id": session.session_id,
                    "turns": len(session.history),
                    "reply_state": state.value,
                },
            )
            return TurnResult(reply=reply, state=state)

    def end_session(self, session: Session) -> EvaluationResult:
        """Score the conversation and move the session to ENDED.

        Raises
        ------
        SessionAlreadyEndedError
            If the session is already ENDED.
        TurnInProgressError
            If a turn is still in flight for this session.
        """
        with self._exclusive(session.session_id):
            if session.state == SessionState.ENDED:
                raise SessionAlreadyEndedError(session.session_id)

            lang = session.language
            transcript = format_transcript(session.history, lang)
            topics = catalog.knowledge_for_brand(session.config.brand).topics
            raw = self.transport.chat_complete(
                [
                    {
                        "role": "system",
                        "content": with_format_directive(scoring_system_prompt(), lang),
                    },
                    {"role": "user", "content": build_scoring_prompt(transcript, topics)},
                ]
            )
            if not raw:
                logger.warning(
                    "[SESSION] Scoring returned no content for %s; using fallback scores",
                    session.session_id,
                )

            evaluation = parse_evaluation(raw)
            session.evaluation = evaluation
            self._transition(session, SessionState.ENDED)
            self.session_store.save_session(session)
            # ENDED is final: later calls fail on state, not on the lock.
            self._forget_lock(session.session_id)

            logger.info(
                "[SESSION] Ended %s with overall score %.1f",
                session.session_id,
                evaluation.overall_score,
            )
            self._log_event(
                "session_ended",
                {
                    "session_id": session.session_id,
                    "overall_score": evaluation.overall_score,
                    "turns": len(session.history),
                },
            )
            return evaluation

    def reset(self, session: Session) -> None:
        """Forget a session entirely.

        Raises
        ------
        TurnInProgressError
            If a turn or end is in flight for this session.
        """
        with self._exclusive(session.session_id):
            self.session_store.delete_session(session.session_id)
            self._forget_lock(session.session_id)
        self._log_event("session_reset", {"session_id": session.session_id})

    def get_session(self, session_id: str) -> Session:
        session = self.session_store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _exchange(self, session: Session, text: str):
        """Call the model for one turn and return (reply, ReplyState)."""
        lang = session.language

        messages: List[Dict[str, str]] = [
            {"role": "system", "content": session.dialogue_system_prompt}
        ]
        messages.extend(
            {"role": turn.transport_role, "content": turn.text} for turn in session.history
        )
        messages.append({"role": "user", "content": text})

        # The realism prompt is sent separately and may be weighted above the
        # dialogue prompt, so it carries the language directive as well.
        raw = self.transport.chat_complete(
            messages,
            system_prompt=with_language_directive(realism_prompt(), lang),
            temperature=self.dialogue_temperature,
        )

        if not raw or not raw.strip():
            logger.warning(
                "[SESSION] Empty model reply for %s; using fallback customer reply",
                session.session_id,
            )
            self._log_event("transport_fallback", {"session_id": session.session_id})
            return fallback_customer_reply(lang), ReplyState.NORMAL

        if contains_disallowed_script(raw, lang):
            logger.warning(
                "[SESSION] Model reply violated the %s language policy for %s",
                lang,
                session.session_id,
            )
            self._log_event(
                "language_refusal",
                {"session_id": session.session_id, "stage": "post_receive"},
            )
            return ENGLISH_REFUSAL, ReplyState.NORMAL

        parsed = parse_dialogue_reply(raw)
        return parsed.clean_text, parsed.state

    def _transition(self, session: Session, new_state: SessionState) -> None:
        if new_state not in TRANSITIONS[session.state]:
            raise SessionNotActiveError(session.session_id, session.state)
        session.state = new_state

    def _forget_lock(self, session_id: str) -> None:
        with self._locks_guard:
            self._locks.pop(session_id, None)

    @contextmanager
    def _exclusive(self, session_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(session_id, threading.Lock())
        if not lock.acquire(blocking=False):
            raise TurnInProgressError(session_id)
        try:
            yield
        finally:
            lock.release()

    def _log_event(self, event_type: str, payload: dict) -> None:
        if self.log_store is None:
            return
        try:
            self.log_store.log_event(event_type=event_type, payload=payload)
        except Exception:
            # Logging failures should not affect main flow.
            logger.warning("[SESSION] Could not record %s event", event_type, exc_info=True)
