# shikishi/routes/websockets.py
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, Depends
from sqlalchemy.orm import Session
import logging
import json
import asyncio
from datetime import datetime, timezone

from shikishi.models.board import MessageBoard
from shikishi.services.deps import get_db
from shikishi.services.websocket_manager import WebSocketManager

logger = logging.getLogger("shikishi.websocket.routes")
logger.setLevel(logging.INFO)

router = APIRouter(tags=["websocket"])

PING_INTERVAL_SECONDS = 30.0


@router.websocket("/ws/boards/{board_id}")
async def board_feed(websocket: WebSocket, board_id: int, db: Session = Depends(get_db)):
    """
    Live feed for people looking at a board.

    Message Protocol:
    - Sends: {"type": "connected", "board_id": X}
    - Sends: {"type": "message_created", "message": {...}}
    - Sends: {"type": "message_deleted", "message_id": X}
    - Sends: {"type": "ping", "timestamp": "..."}
    - Receives: {"type": "ping"} -> replies {"type": "pong"}
    """
    board_exists = db.get(MessageBoard, board_id) is not None
    # Hand the pooled connection back; viewers may stay connected for hours
    db.close()

    if not board_exists:
        logger.warning(f"WebSocket connection rejected: board {board_id} not found")
        await websocket.close(code=1008, reason="Message board not found")
        return

    await websocket.accept()
    manager = WebSocketManager.get_instance()
    connection_id = await manager.register(websocket, board_id)

    try:
        await websocket.send_json({"type": "connected", "board_id": board_id})

        last_ping_time = asyncio.get_running_loop().time()
        while True:
            elapsed = asyncio.get_running_loop().time() - last_ping_time
            timeout = max(0.1, PING_INTERVAL_SECONDS - elapsed)
            try:
                message_text = await asyncio.wait_for(websocket.receive_text(), timeout=timeout)
            except asyncio.TimeoutError:
                await websocket.send_json({
                    "type": "ping",
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                })
                last_ping_time = asyncio.get_running_loop().time()
                continue

            manager.update_activity(connection_id)
            await handle_client_message(websocket, message_text)

    except WebSocketDisconnect:
        logger.info(f"WebSocket client disconnected: connection={connection_id}")
    finally:
        await manager.unregister(connection_id)


async def handle_client_message(websocket: WebSocket, message_text: str) -> None:
    try:
        data = json.loads(message_text)
    except json.JSONDecodeError:
        logger.warning(f"Invalid JSON from board viewer: {message_text[:100]}")
        return

    if isinstance(data, dict) and data.get("type") == "ping":
        await websocket.send_json({"type": "pong"})
    else:
        logger.debug(f"Ignoring viewer message: {data!r}")
