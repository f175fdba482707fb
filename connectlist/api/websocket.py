# connectlist/api/websocket.py
import logging

from fastapi import APIRouter, HTTPException, Query, WebSocket, WebSocketDisconnect, status

from connectlist.security.jwt_utils import decode_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws/notifications")
async def websocket_notifications(websocket: WebSocket, token: str = Query(...)):
    """
    WebSocket para notificaciones en tiempo real.
    El cliente se conecta con:
      ws://<host>/ws/notifications?token=JWT
    """
    try:
        payload = decode_token(token)
    except HTTPException as e:
        logger.info("ws rechazado: %s", e.detail)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = payload["sub"]
    ws_manager = websocket.app.state.ws_manager
    await ws_manager.connect(user_id, websocket)

    try:
        while True:
            # el cliente puede mandar "ping" para mantener viva la conexión
            text = await websocket.receive_text()
            if text == "ping":
                await websocket.send_json({"event": "pong"})
    except WebSocketDisconnect:
        ws_manager.disconnect(user_id, websocket)
