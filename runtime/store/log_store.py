"""
LogStore: append-only logging for SaleSim session events.

Events are written as JSON lines to:

    <log_dir>/events_YYYY-MM-DD.jsonl

ConsoleLogStore is the development sink used when no log directory is
configured; it just forwards events to the standard logger.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path


logger = logging.getLogger(__name__)


class LogStore:
    """Date-based JSONL event log."""

    def __init__(self, log_dir: str = "runtime/data/logs"):
        self.log_dir = Path(log_dir)
        self._lock = threading.Lock()

    def log_event(self, event_type: str, payload: dict) -> None:
        """Append an event to today's log file."""
        now = datetime.now(timezone.utc)
        record = {
            "timestamp": now.isoformat(),
            "event_type": event_type,
            "payload": payload,
        }
        path = self.log_dir / f"events_{now.strftime('%Y-%m-%d')}.jsonl"

        with self._lock:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")


class ConsoleLogStore:
    """Very small log sink used during local development / testing."""

    def log_event(self, event_type: str, payload: dict) -> None:
        logger.info("[EVENT] %s: %s", event_type, payload)
