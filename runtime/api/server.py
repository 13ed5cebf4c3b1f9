"""
FastAPI application entry point for the SaleSim runtime.

Responsibilities:
- create the FastAPI app
- construct shared singletons (SessionStore, LogStore, TransportAdapter,
  SessionOrchestrator, VoiceTurnHandler)
- include session routes under /agent and the chat/ASR relay under /api
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from configs.settings import settings
from core.api.transport import TransportAdapter
from runtime.agents.session_orchestrator import SessionOrchestrator
from runtime.agents.voice_turns import VoiceTurnHandler
from runtime.store.log_store import ConsoleLogStore, LogStore
from runtime.store.session_store import SessionStore
from . import relay_routes, session_routes


# ---------------------------------------------------------------------------
# Shared singletons
# ---------------------------------------------------------------------------

# Session storage: in-memory with optional file backing under the data dir.
session_store = SessionStore(
    data_dir=str(settings.runtime_data_dir) if settings.runtime_data_dir else None
)

# Event log: JSONL files when a directory is configured, console otherwise.
if settings.event_log_dir is not None:
    log_store = LogStore(log_dir=str(settings.event_log_dir))
else:
    log_store = ConsoleLogStore()

# Outbound calls to the chat / transcription endpoints (the relay below by default).
transport = TransportAdapter()

orchestrator = SessionOrchestrator(
    transport=transport,
    session_store=session_store,
    log_store=log_store,
    dialogue_temperature=settings.dialogue_temperature,
)

voice_handler = VoiceTurnHandler(orchestrator=orchestrator, transport=transport)

# ---------------------------------------------------------------------------
# FastAPI app + route registration
# ---------------------------------------------------------------------------

app = FastAPI(title="SaleSim Runtime")

# The browser client is served from a different origin during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize the router module with our shared objects, then include it.
session_routes.init_routes(
    orchestrator=orchestrator,
    voice_handler=voice_handler,
)
app.include_router(session_routes.router, prefix="/agent")
app.include_router(relay_routes.router, prefix="/api")
