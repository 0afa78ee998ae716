"""Likes Application Package — like/match state machine and notification fan-out.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
