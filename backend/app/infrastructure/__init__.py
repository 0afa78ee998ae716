"""Infrastructure Layer — storage adapters, external service clients, cross-cutting concerns.

Invariants:
    - Infrastructure implements the protocols in core/repository_protocols.py
    - All external calls bounded by a timeout and mapped to core/errors.py

Design Decisions:
    - Thin adapters over SQLAlchemy, httpx and Starlette WebSockets
"""
