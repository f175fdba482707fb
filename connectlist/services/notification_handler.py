# connectlist/services/notification_handler.py
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from azure.core.exceptions import AzureError
from pydantic import ValidationError

from connectlist.core.messages import NotificationType, format_notification_message, notification_title
from connectlist.core.rows import map_notification_row
from connectlist.infra.table_client import get_profile, insert_notification
from connectlist.models.notification import Notification
from connectlist.models.queue_message import QueueMessage
from connectlist.services.websocket_manager import WebSocketManager

logger = logging.getLogger(__name__)


async def process_notification(
    msg: dict, ws_manager: Optional[WebSocketManager] = None
) -> Optional[Dict[str, Any]]:
    """
    Procesa un evento de interacción (de la cola o de la propia API).
    Estructura esperada:
      {
        "type": "like",
        "userId": "<destinatario>",
        "actorId": "<quien hizo la acción>",
        "targetId": "<lista, conversación...>",
        "data": {"list_title": "...", ...}
      }
    Persiste la notificación y la empuja por WebSocket si el destinatario
    está conectado. Devuelve la entidad guardada, o None si se descartó.
    """
    try:
        event = QueueMessage.model_validate(msg)
    except ValidationError as e:
        logger.warning("evento de notificación inválido descartado: %s", e)
        return None

    # nadie se notifica a sí mismo
    if event.actorId and event.actorId == event.userId:
        return None

    data = event.data or {}
    entity = Notification(
        PartitionKey=event.userId,
        RowKey=str(uuid.uuid4()),
        type=event.type,
        actorId=event.actorId,
        targetId=event.targetId,
        title=notification_title(event.type),
        message=format_notification_message(event.type, data),
        read=False,
        createdAt=datetime.now(timezone.utc).isoformat(),
        data=json.dumps(data),
    ).model_dump()

    # 1. Persistir en Table Storage
    insert_notification(entity)
    logger.info("notificación %s (%s) para user=%s", entity["RowKey"], event.type, event.userId)

    # 2. Enviar por WebSocket si está conectado
    if ws_manager is not None and ws_manager.is_connected(event.userId):
        actor = None
        if event.actorId:
            try:
                actor = get_profile(event.actorId)
            except AzureError as e:
                logger.warning("no se pudo leer el perfil del actor %s: %s", event.actorId, e)
        view = map_notification_row(entity, actor=actor)
        await ws_manager.send_to_user(event.userId, {
            "event": "notification",
            "title": entity["title"],
            "notification": view.model_dump(),
        })

    return entity


async def _send(
    noti_type: NotificationType,
    user_id: str,
    actor_id: Optional[str],
    ws_manager: Optional[WebSocketManager],
    target_id: Optional[str] = None,
    data: Optional[dict] = None,
):
    """
    Notificación originada por una acción de la API (like, comentario...).
    Si no se puede guardar devuelve None: la acción ya quedó persistida
    y no se revierte. El consumer de la cola llama a process_notification
    directo para que el mensaje vuelva a entregarse.
    """
    try:
        return await process_notification(
            {
                "type": noti_type.value,
                "userId": user_id,
                "actorId": actor_id,
                "targetId": target_id,
                "data": data or {},
            },
            ws_manager,
        )
    except AzureError as e:
        logger.error("no se pudo guardar la notificación %s para user=%s: %s", noti_type.value, user_id, e)
        return None


async def send_like_notification(list_owner_id, actor_id, list_id, list_title, ws_manager=None):
    return await _send(NotificationType.LIKE, list_owner_id, actor_id, ws_manager,
                       target_id=list_id, data={"list_title": list_title})


async def send_comment_notification(list_owner_id, actor_id, list_id, list_title, comment_text, ws_manager=None):
    return await _send(NotificationType.COMMENT, list_owner_id, actor_id, ws_manager,
                       target_id=list_id,
                       data={"list_title": list_title, "comment_text": comment_text})


async def send_follow_notification(followed_user_id, actor_id, ws_manager=None):
    return await _send(NotificationType.FOLLOW, followed_user_id, actor_id, ws_manager,
                       target_id=actor_id)


async def send_message_notification(recipient_id, actor_id, conversation_id=None, ws_manager=None):
    return await _send(NotificationType.MESSAGE, recipient_id, actor_id, ws_manager,
                       target_id=conversation_id)


async def send_list_share_notification(user_id, actor_id, list_id, list_title, ws_manager=None):
    return await _send(NotificationType.LIST_SHARE, user_id, actor_id, ws_manager,
                       target_id=list_id, data={"list_title": list_title})


async def send_group_activity_notification(
    user_ids: Iterable[str], actor_id, list_id, list_title, activity_type, ws_manager=None
) -> List[Dict[str, Any]]:
    notifications = []
    for user_id in user_ids:
        entity = await _send(NotificationType.GROUP_ACTIVITY, user_id, actor_id, ws_manager,
                             target_id=list_id,
                             data={"list_title": list_title, "activity_type": activity_type})
        if entity:
            notifications.append(entity)
    return notifications


async def send_suggestion_notification(user_id, ws_manager=None):
    return await _send(NotificationType.SUGGESTION, user_id, None, ws_manager)


async def send_reminder_notification(user_id, reminder_text=None, ws_manager=None):
    data = {"reminder_text": reminder_text} if reminder_text else {}
    return await _send(NotificationType.REMINDER, user_id, None, ws_manager, data=data)
