# connectlist/services/interactions.py
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from connectlist.infra import table_client as tables
from connectlist.services.notification_handler import (
    send_comment_notification,
    send_like_notification,
    send_list_share_notification,
)
from connectlist.services.websocket_manager import WebSocketManager

MAX_COMMENT_LENGTH = 500


class ListNotFoundError(LookupError):
    pass


def require_list(owner_id: str, list_id: str) -> Dict[str, Any]:
    row = tables.get_list(owner_id, list_id)
    if row is None:
        raise ListNotFoundError(f"list {owner_id}/{list_id} not found")
    return row


async def like_list(
    owner_id: str,
    list_id: str,
    user_id: str,
    ws_manager: Optional[WebSocketManager] = None,
) -> Dict[str, Any]:
    row = require_list(owner_id, list_id)
    tables.insert_like(list_id, owner_id, user_id, datetime.now(timezone.utc).isoformat())
    await send_like_notification(owner_id, user_id, list_id, row.get("title"), ws_manager=ws_manager)
    return row


def unlike_list(list_id: str, user_id: str):
    tables.delete_like(list_id, user_id)


async def add_comment(
    owner_id: str,
    list_id: str,
    user_id: str,
    text: str,
    ws_manager: Optional[WebSocketManager] = None,
) -> Dict[str, Any]:
    row = require_list(owner_id, list_id)
    comment = {
        "PartitionKey": list_id,
        "RowKey": str(uuid.uuid4()),
        "user_id": user_id,
        "text": text[:MAX_COMMENT_LENGTH],
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    tables.insert_comment(comment)
    await send_comment_notification(
        owner_id, user_id, list_id, row.get("title"), comment["text"], ws_manager=ws_manager
    )
    return comment


async def share_list(
    owner_id: str,
    list_id: str,
    user_ids: Iterable[str],
    ws_manager: Optional[WebSocketManager] = None,
) -> List[Dict[str, Any]]:
    """Avisa a cada usuario que fue agregado a la lista."""
    row = require_list(owner_id, list_id)
    sent = []
    for user_id in user_ids:
        entity = await send_list_share_notification(
            user_id, owner_id, list_id, row.get("title"), ws_manager=ws_manager
        )
        if entity:
            sent.append(entity)
    return sent
