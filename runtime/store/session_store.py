"""Minimal session storage for SaleSim.

For now, this is primarily an in-memory dict of session_id -> Session,
with optional JSON persistence under a data directory.

The design is intentionally simple:
- In-memory access is the primary source of truth during a run.
- If a data_dir is configured, sessions are also written to
  `data_dir/sessions/<session_id>.json` so that finished sessions can be
  reviewed or replayed later.
- There is no cross-session shared state; each Session is owned by the
  orchestrator that created it.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from ..models.session_models import Session


logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory + optional file-backed session store.

    Parameters
    ----------
    data_dir:
        Base directory for storing session JSON files. If provided,
        sessions will be written to and read from
        `data_dir/sessions/<session_id>.json`. If not provided, sessions
        live in memory only.
    """

    def __init__(self, data_dir: Optional[str] = None) -> None:
        self._sessions: Dict[str, Session] = {}
        self._data_dir: Optional[Path] = Path(data_dir) if data_dir else None

        if self._data_dir is not None:
            self._sessions_dir.mkdir(parents=True, exist_ok=True)

    @property
    def _sessions_dir(self) -> Path:
        return self._data_dir / "sessions"

    def get_session(self, session_id: str) -> Optional[Session]:
        """Retrieve an existing session by ID.

        Lookup order:
        1. Check the in-memory cache.
        2. If not found and a data_dir is configured, attempt to
           load the session from disk.
        3. If still not found, return None.
        """
        if session_id in self._sessions:
            return self._sessions[session_id]

        if self._data_dir is not None:
            path = self._sessions_dir / f"{session_id}.json"
            if path.is_file():
                try:
                    with path.open("r", encoding="utf-8") as f:
                        session = Session.model_validate(json.load(f))
                except (OSError, ValueError, ValidationError):
                    logger.warning("[STORE] Could not load session file %s", path)
                    return None

                self._sessions[session_id] = session
                return session

        return None

    def save_session(self, session: Session) -> None:
        """Persist the given session in memory and to disk (if enabled).

        This should be called whenever the session is updated (e.g.,
        when new turns are appended or the state changes).
        """
        self._sessions[session.session_id] = session
        self._persist_session(session)

    def delete_session(self, session_id: str) -> bool:
        """Forget a session (memory and disk). Returns True if it existed."""
        existed = self._sessions.pop(session_id, None) is not None

        if self._data_dir is not None:
            path = self._sessions_dir / f"{session_id}.json"
            if path.is_file():
                path.unlink()
                existed = True

        return existed

    def _persist_session(self, session: Session) -> None:
        if self._data_dir is None:
            return

        self._sessions_dir.mkdir(parents=True, exist_ok=True)
        path = self._sessions_dir / f"{session.session_id}.json"

        with path.open("w", encoding="utf-8") as f:
            json.dump(session.model_dump(mode="json"), f, ensure_ascii=False, indent=2)
