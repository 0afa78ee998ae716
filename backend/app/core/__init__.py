"""Core — pure like/match rules, payload builders, domain types and errors.

Invariants:
    - Nothing here performs IO or imports from api/, services/, infrastructure/ or db/
    - The shell reaches storage and transports only through repository_protocols.py
"""
