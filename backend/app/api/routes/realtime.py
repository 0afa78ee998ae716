"""Realtime Route — WebSocket channel on which users receive `new_like` events.

Invariants:
    - The socket is authenticated with the same identity header as HTTP routes;
      an unauthenticated socket is closed with 1008 before accept
    - Inbound frames are ignored; the socket only exists to receive events
    - The connection is always removed from the hub when the socket ends
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from app.api.deps import resolve_identity
from app.config import get_settings
from app.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["realtime"])


@router.websocket("/realtime")
async def realtime_channel(websocket: WebSocket):
    try:
        identity = resolve_identity(
            websocket.headers.get(get_settings().identity_header),
        )
    except UnauthorizedError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    hub = websocket.app.state.realtime
    await websocket.accept()
    await hub.connect(identity.user_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(
            "Realtime connection closed", extra={"user_id": str(identity.user_id)},
        )
    finally:
        await hub.disconnect(identity.user_id, websocket)
