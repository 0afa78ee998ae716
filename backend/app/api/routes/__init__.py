"""Routers — likes, realtime channel and health probes, each with its own prefix."""
