from typing import List

from fastapi import WebSocket

from ticketing.logger import get_logger

logger = get_logger(__name__)


class ConnectionManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: dict):
        for connection in list(self.active_connections):
            try:
                await connection.send_json(message)
            except (RuntimeError, OSError) as e:
                # Client went away without a close frame
                logger.info("Dropping websocket after failed send: %s", e)
                self.disconnect(connection)


# Separate managers for different types of updates
event_manager = ConnectionManager()
ticket_manager = ConnectionManager()
