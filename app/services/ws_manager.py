"""WebSocket fan-out of inspection progress events."""

from __future__ import annotations

import logging

from fastapi import WebSocket

from app.schemas.ws_messages import WSMessage

logger = logging.getLogger(__name__)


class ConnectionManager:
    def __init__(self):
        self._connections: dict[str, list[WebSocket]] = {}

    async def connect(self, inspection_id: str, websocket: WebSocket):
        await websocket.accept()
        self._connections.setdefault(inspection_id, []).append(websocket)

    def disconnect(self, inspection_id: str, websocket: WebSocket):
        conns = self._connections.get(inspection_id, [])
        if websocket in conns:
            conns.remove(websocket)
        if not conns:
            self._connections.pop(inspection_id, None)

    async def broadcast(self, inspection_id: str, message: WSMessage):
        """Send an event to every client watching an inspection; drop dead sockets."""
        conns = self._connections.get(inspection_id, [])
        payload = message.model_dump_json()
        for ws in list(conns):
            try:
                await ws.send_text(payload)
            except Exception as e:
                logger.debug(f"Dropping websocket for {inspection_id}: {e}")
                self.disconnect(inspection_id, ws)


ws_manager = ConnectionManager()
