# connectlist/infra/servicebus_consumer.py
import asyncio
import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from azure.servicebus import TransportType
from azure.servicebus.aio import ServiceBusClient

from connectlist.services.notification_handler import process_notification
from connectlist.services.websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)

SB_CONN_STR = os.getenv("AZURE_SERVICE_BUS_CONNECTION_STRING")
SB_QUEUE = os.getenv("AZURE_SERVICE_BUS_QUEUE_NAME", "interaction-events")
RECONNECT_DELAY = 5  # segundos

_status: Dict[str, Any] = {
    "startedAt": None,
    "lastMessageAt": None,
    "lastError": None,
    "processed": 0,
}


def consumer_status() -> Dict[str, Any]:
    return {
        **_status,
        "queue": SB_QUEUE,
        "hasConnectionString": bool(SB_CONN_STR),
    }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def decode_message_body(msg) -> dict:
    """El body de un mensaje de Service Bus llega como secuencia de bytes."""
    body_bytes = b"".join(part for part in msg.body)
    return json.loads(body_bytes.decode("utf-8"))


async def handle_message(receiver, msg, ws_manager: Optional[WebSocketManager]):
    """
    Procesa un mensaje y lo completa solo si salió bien; si no, queda
    en la cola para reintento (o DLQ por MaxDeliveryCount).
    """
    try:
        payload = decode_message_body(msg)
        logger.debug("[consumer] mensaje recibido: %s", payload)
        await process_notification(payload, ws_manager)
        await receiver.complete_message(msg)
    except Exception as e:
        _status["lastError"] = f"{type(e).__name__}: {e}"
        logger.exception("[consumer] error procesando mensaje")
        return False

    _status["processed"] += 1
    _status["lastMessageAt"] = _now()
    return True


async def consume_notifications(ws_manager: Optional[WebSocketManager] = None):
    """
    Consumer asíncrono de la cola de eventos de interacción:
      - AMQP sobre WebSocket (443) para funcionar detrás de proxies.
      - Cada evento pasa por process_notification (persistencia + WS).
      - Reconecta tras una pausa fija si se cae la conexión.
    """
    if not SB_CONN_STR:
        logger.warning("[consumer] falta AZURE_SERVICE_BUS_CONNECTION_STRING, no se consume la cola")
        return

    _status["startedAt"] = _now()

    while True:
        try:
            logger.info("[consumer] conectando a Service Bus (cola: %s)", SB_QUEUE)
            async with ServiceBusClient.from_connection_string(
                SB_CONN_STR,
                transport_type=TransportType.AmqpOverWebsocket,
            ) as sb_client:
                receiver = sb_client.get_queue_receiver(queue_name=SB_QUEUE, max_wait_time=20)
                async with receiver:
                    logger.info("[consumer] escuchando cola: %s", SB_QUEUE)
                    while True:
                        messages = await receiver.receive_messages(
                            max_message_count=10,
                            max_wait_time=10,
                        )
                        if not messages:
                            await asyncio.sleep(0.5)
                            continue
                        for msg in messages:
                            await handle_message(receiver, msg, ws_manager)

            await asyncio.sleep(1)

        except asyncio.CancelledError:
            logger.info("[consumer] detenido")
            raise
        except Exception as e:
            _status["lastError"] = f"{type(e).__name__}: {e}"
            logger.error("[consumer] error de conexión, reintento en %ss: %s", RECONNECT_DELAY, e)
            await asyncio.sleep(RECONNECT_DELAY)
