"""API — HTTP and WebSocket surface of the likes service.

Invariants:
    - Caller identity resolved in deps.py, never inside a route body
    - Domain errors rendered by error_handlers.py only
"""
