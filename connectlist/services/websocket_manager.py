# connectlist/services/websocket_manager.py
import logging
from typing import Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class WebSocketManager:
    """
    Conexiones WebSocket abiertas por usuario: user_id -> set(WebSocket).
    Un mismo usuario puede tener varias (dispositivos, pestañas).
    Se crea en el startup y vive en app.state.
    """
    def __init__(self):
        self.active_connections: Dict[str, Set[WebSocket]] = {}

    async def connect(self, user_id: str, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)
        logger.info("ws conectado user=%s (%d conexiones)", user_id, len(self.active_connections[user_id]))

    def disconnect(self, user_id: str, websocket: WebSocket):
        sockets = self.active_connections.get(user_id)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.active_connections[user_id]

    def is_connected(self, user_id: str) -> bool:
        return bool(self.active_connections.get(user_id))

    async def send_to_user(self, user_id: str, message: dict) -> int:
        """
        Envía el mensaje a todas las conexiones del usuario y devuelve
        a cuántas llegó. Los sockets que fallan se descartan.
        """
        sockets = self.active_connections.get(user_id)
        if not sockets:
            return 0

        delivered = 0
        dead_sockets = []
        for ws in list(sockets):
            try:
                await ws.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning("ws muerto para user=%s: %s", user_id, e)
                dead_sockets.append(ws)

        for ws in dead_sockets:
            self.disconnect(user_id, ws)
        return delivered

    async def close_all(self):
        for user_id, sockets in list(self.active_connections.items()):
            for ws in list(sockets):
                try:
                    await ws.close()
                except Exception as e:
                    logger.debug("error cerrando ws de user=%s: %s", user_id, e)
        self.active_connections.clear()
