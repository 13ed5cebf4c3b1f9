"""
Pydantic models used by the SaleSim runtime.

Split into:
- session_models: SessionConfig + Session + Turn + SessionState
- api_models: HTTP request/response schemas
"""
