"""WebSocket endpoint: streams occurrence lifecycle events to subscribers.

Path: /ws/occurrences

Messages are ``{"event": "occurrence:created" | "occurrence:updated" |
"occurrence:deleted", "data": {...}}``.  Subscribers may send "ping" and
get "pong" back; anything else they send is ignored.
"""

from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from sisocc.services.connection_manager import ConnectionManager


def create_subscription_router(manager: ConnectionManager) -> APIRouter:
    router = APIRouter()

    @router.websocket("/ws/occurrences")
    async def subscribe(websocket: WebSocket) -> None:
        await manager.connect(websocket)
        try:
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
        except WebSocketDisconnect:
            await manager.disconnect(websocket)

    return router
