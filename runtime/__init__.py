"""
Runtime package for the SaleSim training server.

This package contains:
- API layer (FastAPI server, session routes, chat/ASR relay)
- Agents (session orchestration, voice turns)
- Stores (sessions, event logs)
- Models (Pydantic models for sessions and HTTP payloads)
"""
