"""Realtime Hub — per-user registry of open WebSocket connections.

Invariants:
    - A user may hold several connections (one per device); emit() reaches all
    - A connection whose send fails is dropped from the registry, never retried
    - emit() returns the number of connections the event reached
    - Registry mutations guarded by one asyncio.Lock

Design Decisions:
    - In-process hub: one registry per worker process; cross-process fan-out
      belongs to the transport layer in front of the service
"""

import asyncio
import logging
from collections import defaultdict

from fastapi import WebSocket

from app.core.domain_types import UserId

logger = logging.getLogger(__name__)


class RealtimeHub:
    """Emits named events to a user's connected sockets."""

    def __init__(self):
        self._connections: dict[UserId, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, user_id: UserId, websocket: WebSocket) -> None:
        async with self._lock:
            self._connections[user_id].add(websocket)
        logger.info("Realtime connection opened", extra={"user_id": str(user_id)})

    async def disconnect(self, user_id: UserId, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(user_id)
            if sockets is None:
                return
            sockets.discard(websocket)
            if not sockets:
                del self._connections[user_id]

    def connection_count(self, user_id: UserId) -> int:
        return len(self._connections.get(user_id, ()))

    async def emit(self, user_id: UserId, event: str, payload: dict) -> int:
        async with self._lock:
            sockets = list(self._connections.get(user_id, ()))
        delivered = 0
        for websocket in sockets:
            try:
                await websocket.send_json({"event": event, "data": payload})
                delivered += 1
            except Exception as e:
                logger.warning(
                    f"Dropping realtime connection after send failure: {e}",
                    extra={"user_id": str(user_id), "event_kind": event},
                )
                await self.disconnect(user_id, websocket)
        return delivered

    async def close_all(self) -> None:
        async with self._lock:
            sockets = [ws for group in self._connections.values() for ws in group]
            self._connections.clear()
        for websocket in sockets:
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Ignoring close failure on shutdown: {e}")
