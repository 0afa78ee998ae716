"""Services Layer — match engine, notification dispatcher, and query projections.

Invariants:
    - Services sequence IO around the pure decisions in core/
    - Collaborators (store, profiles, push, realtime) injected, never imported as globals
"""
