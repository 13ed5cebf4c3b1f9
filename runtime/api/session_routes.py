"""HTTP routes for running a training session.

Exposes endpoints like:

- POST /agent/start_session -> generates the customer persona, returns the
                               session_id and the customer's opening line
- POST /agent/turn          -> takes (session_id, message) and returns the
                               customer's reply and the decoded state
- POST /agent/voice_turn    -> same, from base64 audio
- POST /agent/end           -> scores the session
- POST /agent/reset         -> forgets the session
- GET  /agent/sessions/{id} -> read-only projection of a session
"""

import logging

from fastapi import APIRouter, HTTPException
from typing import Optional

from exceptions.exceptions import (
    ConfigurationError,
    PersonaGenerationError,
    SessionNotActiveError,
    SessionNotFoundError,
    TranscriptionError,
    TurnInProgressError,
)
from ..models.api_models import (
    SessionRequest,
    SessionView,
    StartSessionRequest,
    StartSessionResponse,
    TurnRequest,
    TurnResponse,
    VoiceTurnRequest,
    VoiceTurnResponse,
)
from ..models.session_models import SessionConfig
from ..agents.session_orchestrator import SessionOrchestrator
from ..agents.voice_turns import VoiceTurnHandler


logger = logging.getLogger(__name__)

# Router for all agent-related endpoints
router = APIRouter()


# Module-level references, to be initialized by the server.
_ORCHESTRATOR: Optional[SessionOrchestrator] = None
_VOICE_HANDLER: Optional[VoiceTurnHandler] = None


def init_routes(
    orchestrator: SessionOrchestrator,
    voice_handler: Optional[VoiceTurnHandler] = None,
) -> None:
    """Initialize module-level references used by the route handlers."""
    global _ORCHESTRATOR, _VOICE_HANDLER
    _ORCHESTRATOR = orchestrator
    _VOICE_HANDLER = voice_handler


def _require_orchestrator() -> SessionOrchestrator:
    if _ORCHESTRATOR is None:
        raise HTTPException(
            status_code=500,
            detail="SessionOrchestrator is not configured on the server.",
        )
    return _ORCHESTRATOR


def _require_voice_handler() -> VoiceTurnHandler:
    if _VOICE_HANDLER is None:
        raise HTTPException(
            status_code=500,
            detail="VoiceTurnHandler is not configured on the server.",
        )
    return _VOICE_HANDLER


def _to_http_error(exc: Exception) -> HTTPException:
    """Map a domain exception (one of _DOMAIN_ERRORS) to an HTTP error."""
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, SessionNotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (SessionNotActiveError, TurnInProgressError)):
        return HTTPException(status_code=409, detail=str(exc))
    # PersonaGenerationError, TranscriptionError: the upstream gave nothing usable.
    return HTTPException(status_code=502, detail=str(exc))


_DOMAIN_ERRORS = (
    ConfigurationError,
    SessionNotFoundError,
    SessionNotActiveError,
    TurnInProgressError,
    PersonaGenerationError,
    TranscriptionError,
)


@router.post("/start_session", response_model=StartSessionResponse)
def start_session(request: StartSessionRequest) -> StartSessionResponse:
    """Validate the selection, generate the persona and open the session."""
    orchestrator = _require_orchestrator()
    try:
        config = SessionConfig.from_selection(
            persona=request.persona,
            scenario=request.scenario,
            difficulty=request.difficulty,
            brand=request.brand,
            language=request.language,
        )
        session = orchestrator.start_session(config)
    except _DOMAIN_ERRORS as exc:
        error = _to_http_error(exc)
        logger.warning(
            "[AGENT] HTTP %s on start_session persona=%r scenario=%r difficulty=%r reason=%r",
            error.status_code,
            request.persona,
            request.scenario,
            request.difficulty,
            error.detail,
        )
        raise error from exc
    except Exception:
        logger.exception(
            "[AGENT] Unexpected error on start_session persona=%r scenario=%r difficulty=%r",
            request.persona,
            request.scenario,
            request.difficulty,
        )
        raise

    return StartSessionResponse(
        session_id=session.session_id,
        opening_statement=session.opening_statement,
        persona_details=session.persona_details,
        state=session.state,
        language=session.language,
    )


@router.post("/turn", response_model=TurnResponse)
def send_turn(request: TurnRequest) -> TurnResponse:
    """Send one trainee message and return the customer's reply."""
    orchestrator = _require_orchestrator()
    try:
        session = orchestrator.get_session(request.session_id)
        result = orchestrator.send_turn(session, request.message)
    except _DOMAIN_ERRORS as exc:
        error = _to_http_error(exc)
        logger.warning(
            "[AGENT] HTTP %s for session_id=%s message=%r reason=%r",
            error.status_code,
            request.session_id,
            request.message,
            error.detail,
        )
        raise error from exc
    except Exception:
        logger.exception(
            "[AGENT] Unexpected error for session_id=%s message=%r",
            request.session_id,
            request.message,
        )
        raise

    if result is None:
        raise HTTPException(status_code=400, detail="Message is empty")

    return TurnResponse(
        reply=result.reply,
        state=result.state.value,
        session_state=session.state,
    )


@router.post("/voice_turn", response_model=VoiceTurnResponse)
def send_voice_turn(request: VoiceTurnRequest) -> VoiceTurnResponse:
    """Transcribe recorded audio and, if acceptable, send it as a turn."""
    orchestrator = _require_orchestrator()
    voice_handler = _require_voice_handler()
    try:
        session = orchestrator.get_session(request.session_id)
        outcome = voice_handler.submit_audio(session, request.audio_base64)
    except _DOMAIN_ERRORS as exc:
        error = _to_http_error(exc)
        logger.warning(
            "[AGENT] HTTP %s on voice_turn session_id=%s reason=%r",
            error.status_code,
            request.session_id,
            error.detail,
        )
        raise error from exc
    except Exception:
        logger.exception("[AGENT] Unexpected error on voice_turn session_id=%s", request.session_id)
        raise

    return VoiceTurnResponse(
        transcript=outcome.transcript,
        rejected=outcome.rejected,
        reason=outcome.reason,
        reply=outcome.result.reply if outcome.result else None,
        state=outcome.result.state.value if outcome.result else None,
        session_state=session.state,
    )


@router.post("/end")
def end_session(request: SessionRequest) -> dict:
    """Score the session. Returns the evaluation with camelCase keys."""
    orchestrator = _require_orchestrator()
    try:
        session = orchestrator.get_session(request.session_id)
        evaluation = orchestrator.end_session(session)
    except _DOMAIN_ERRORS as exc:
        error = _to_http_error(exc)
        logger.warning(
            "[AGENT] HTTP %s on end session_id=%s reason=%r",
            error.status_code,
            request.session_id,
            error.detail,
        )
        raise error from exc
    except Exception:
        logger.exception("[AGENT] Unexpected error on end session_id=%s", request.session_id)
        raise

    return evaluation.model_dump(by_alias=True)


@router.post("/reset")
def reset_session(request: SessionRequest) -> dict:
    orchestrator = _require_orchestrator()
    try:
        session = orchestrator.get_session(request.session_id)
        orchestrator.reset(session)
    except _DOMAIN_ERRORS as exc:
        error = _to_http_error(exc)
        logger.warning(
            "[AGENT] HTTP %s on reset session_id=%s reason=%r",
            error.status_code,
            request.session_id,
            error.detail,
        )
        raise error from exc
    except Exception:
        logger.exception("[AGENT] Unexpected error on reset session_id=%s", request.session_id)
        raise

    return {"status": "reset", "session_id": request.session_id}


@router.get("/sessions/{session_id}", response_model=SessionView)
def get_session(session_id: str) -> SessionView:
    orchestrator = _require_orchestrator()
    try:
        session = orchestrator.get_session(session_id)
    except SessionNotFoundError as exc:
        raise _to_http_error(exc) from exc
    except Exception:
        logger.exception("[AGENT] Unexpected error reading session_id=%s", session_id)
        raise

    return SessionView(
        session_id=session.session_id,
        config=session.config,
        state=session.state,
        persona_details=session.persona_details,
        history=list(session.history),
        evaluation=session.evaluation,
    )


# --------------------------------------------------------
# Endpoint: GET /healthz
# --------------------------------------------------------
@router.get("/healthz")
def health_check():
    """
    Simple health check endpoint for uptime monitoring.
    """
    return {"status": "ok"}
