"""
Agents used by the SaleSim runtime.

- SessionOrchestrator: session start, turn exchange, termination, scoring
- VoiceTurnHandler: recorded audio -> transcript -> orchestrator turn
"""
