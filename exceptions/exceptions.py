"""
Custom exceptions for SaleSim sessions, transport and relay.

These exceptions are intentionally simple and descriptive.
They are used across:

  - core/api/
  - runtime/agents/
  - runtime/api/

Placing them at the project root (exceptions/) avoids circular imports and
keeps exception types consistent across modules.

Transport failures during a turn, malformed model output and language-policy
violations are NOT represented here: those are recovered locally with
fallback values and never raised.
"""


class ConfigurationError(Exception):
    """
    Raised when a required session selection (persona, scenario, difficulty,
    brand) is missing or unknown. Always raised before any network call.
    """

    def __init__(self, field, value=None):
        self.field = field
        self.value = value
        if value in (None, ""):
            msg = f"Missing required session setting: {field}"
        else:
            msg = f"Unknown value for session setting {field}: {value!r}"
        super().__init__(msg)


class PersonaGenerationError(Exception):
    """
    Raised when the transport returns no content while generating the
    customer persona. No session can start without a persona, so this is
    surfaced to the caller.
    """

    def __init__(self, language="zh"):
        self.language = language
        super().__init__("persona generation failed: the model returned no content")


class TransportContractError(ValueError):
    """
    Raised by the transport adapter when it is called with a malformed
    message list. This is a programming error, not a network failure.

    Example:
        [{"role": "user", "content": "hi"}]   ← expected
        [{"speaker": "user"}]                 ← raises this exception
    """

    def __init__(self, details):
        self.details = details
        super().__init__(f"Invalid chat message payload: {details}")


class TranscriptionError(Exception):
    """
    Raised when the transcription endpoint cannot produce text. Unlike chat
    completions there is no meaningful fallback text to substitute.
    """

    def __init__(self, details, status_code=None):
        self.details = details
        self.status_code = status_code
        msg = "Transcription failed"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        super().__init__(f"{msg}: {details}")


class SessionNotFoundError(LookupError):
    """Raised when a session_id is unknown to the session store."""

    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class SessionNotActiveError(Exception):
    """
    Raised when a turn is submitted to a session that is no longer ACTIVE
    (the customer purchased, left, or the session was ended).
    """

    def __init__(self, session_id, state):
        self.session_id = session_id
        self.state = state
        super().__init__(
            f"Session {session_id} is not active (state={getattr(state, 'value', state)})"
        )


class SessionAlreadyEndedError(SessionNotActiveError):
    """Raised when end_session is called on a session that is already ENDED."""

    def __init__(self, session_id):
        super().__init__(session_id, "ENDED")
        self.args = (f"Session {session_id} has already ended",)


class TurnInProgressError(Exception):
    """
    Raised when a second mutation (turn or end) is attempted on a session
    while another one is still waiting on the network.
    """

    def __init__(self, session_id):
        self.session_id = session_id
        super().__init__(f"Another request is in progress for session {session_id}")
