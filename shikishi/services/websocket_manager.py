# shikishi/services/websocket_manager.py
from dataclasses import dataclass
from typing import Dict, Set, Optional
from datetime import datetime, timezone
from uuid import uuid4
from fastapi import WebSocket
import logging

logger = logging.getLogger("shikishi.websocket")
logger.setLevel(logging.INFO)


@dataclass
class ConnectionInfo:
    """Information about an active board viewer connection"""
    websocket: WebSocket
    connection_id: str
    board_id: int
    connected_at: datetime
    last_activity: datetime


class WebSocketManager:
    """
    Singleton manager for board viewer WebSockets.
    Tracks open connections per board and pushes board changes to them.
    """
    _instance: Optional['WebSocketManager'] = None

    def __init__(self):
        if WebSocketManager._instance is not None:
            raise RuntimeError("WebSocketManager is a singleton. Use get_instance()")

        self.connections: Dict[str, ConnectionInfo] = {}
        self.board_index: Dict[int, Set[str]] = {}
        logger.info("WebSocketManager initialized")

    @classmethod
    def get_instance(cls) -> 'WebSocketManager':
        """Get the singleton instance of WebSocketManager"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None

    async def register(self, websocket: WebSocket, board_id: int) -> str:
        """
        Register a viewer connection for a board.
        Returns the connection id used to unregister it later.
        """
        now = datetime.now(timezone.utc)
        connection_id = uuid4().hex
        self.connections[connection_id] = ConnectionInfo(
            websocket=websocket,
            connection_id=connection_id,
            board_id=board_id,
            connected_at=now,
            last_activity=now,
        )
        self.board_index.setdefault(board_id, set()).add(connection_id)

        logger.info(
            f"WebSocket connected: connection={connection_id}, board={board_id}, "
            f"total_connections={len(self.connections)}"
        )
        return connection_id

    async def unregister(self, connection_id: str) -> None:
        """Remove a connection and clean up indexes"""
        conn_info = self.connections.pop(connection_id, None)
        if conn_info is None:
            return

        viewers = self.board_index.get(conn_info.board_id)
        if viewers is not None:
            viewers.discard(connection_id)
            if not viewers:
                del self.board_index[conn_info.board_id]

        logger.info(
            f"WebSocket disconnected: connection={connection_id}, board={conn_info.board_id}, "
            f"total_connections={len(self.connections)}"
        )

    async def send(self, connection_id: str, message: dict) -> bool:
        """
        Send a message to one connection.
        Returns False (and drops the connection) when the send fails.
        """
        conn_info = self.connections.get(connection_id)
        if conn_info is None:
            return False

        try:
            await conn_info.websocket.send_json(message)
            conn_info.last_activity = datetime.now(timezone.utc)
            return True
        except Exception as e:
            logger.error(f"Failed to send to connection {connection_id}: {e}")
            await self.unregister(connection_id)
            return False

    async def broadcast_to_board(self, board_id: int, message: dict) -> int:
        """
        Broadcast a message to everyone viewing a board.
        Returns count of successful deliveries.
        """
        connection_ids = list(self.board_index.get(board_id, set()))
        if not connection_ids:
            return 0

        sent_count = 0
        for connection_id in connection_ids:
            if await self.send(connection_id, message):
                sent_count += 1

        logger.info(f"Broadcast to board {board_id}: sent to {sent_count}/{len(connection_ids)} viewers")
        return sent_count

    def get_connection_count(self) -> int:
        return len(self.connections)

    def get_board_connection_count(self, board_id: int) -> int:
        return len(self.board_index.get(board_id, set()))

    def update_activity(self, connection_id: str) -> None:
        if connection_id in self.connections:
            self.connections[connection_id].last_activity = datetime.now(timezone.utc)
