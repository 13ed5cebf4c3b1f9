"""
Storage abstractions for the SaleSim runtime.

Includes:
- SessionStore: session storage (in-memory + optional file-backed)
- LogStore / ConsoleLogStore: append-only event logging
"""
