from __future__ import annotations

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.services.ws_manager import ws_manager

router = APIRouter(tags=["websocket"])


@router.websocket("/api/ws/{inspection_id}")
async def websocket_endpoint(websocket: WebSocket, inspection_id: str):
    await ws_manager.connect(inspection_id, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        ws_manager.disconnect(inspection_id, websocket)
