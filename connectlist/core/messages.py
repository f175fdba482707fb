# connectlist/core/messages.py
from enum import Enum
from typing import Any, Mapping, Optional

COMMENT_PREVIEW_LENGTH = 30


class NotificationType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    MESSAGE = "message"
    LIST_SHARE = "list_share"
    GROUP_ACTIVITY = "group_activity"
    SUGGESTION = "suggestion"
    REMINDER = "reminder"


DEFAULT_MESSAGE = "interacted with your content"
DEFAULT_TITLE = "Notification"

NOTIFICATION_TITLES = {
    NotificationType.LIKE: "New Like",
    NotificationType.COMMENT: "New Comment",
    NotificationType.FOLLOW: "New Follower",
    NotificationType.MESSAGE: "New Message",
    NotificationType.LIST_SHARE: "List Share",
    NotificationType.GROUP_ACTIVITY: "Group Activity",
    NotificationType.SUGGESTION: "Suggestion",
    NotificationType.REMINDER: "Reminder",
}


def coerce_type(value: Any) -> Optional[NotificationType]:
    """Devuelve el NotificationType o None si el tag no es conocido."""
    if isinstance(value, NotificationType):
        return value
    try:
        return NotificationType(value)
    except (ValueError, TypeError):
        return None


def truncate(text: str, length: int = COMMENT_PREVIEW_LENGTH) -> str:
    if len(text) > length:
        return text[:length] + "..."
    return text


def format_notification_message(
    noti_type: Any, payload: Optional[Mapping[str, Any]] = None
) -> str:
    """
    Texto que acompaña al nombre del actor en el feed de notificaciones.
    Nunca lanza: un tipo desconocido o un payload raro da el texto genérico.
    """
    data = payload if isinstance(payload, Mapping) else {}
    kind = coerce_type(noti_type)

    if kind is NotificationType.LIKE:
        return f'liked your list "{data.get("list_title") or "your list"}"'
    if kind is NotificationType.COMMENT:
        comment = str(data.get("comment_text") or "Great list!")
        return f'commented on your list: "{truncate(comment)}"'
    if kind is NotificationType.FOLLOW:
        return "started following you"
    if kind is NotificationType.MESSAGE:
        return "sent you a message"
    if kind is NotificationType.LIST_SHARE:
        return f"added you to '{data.get('list_title') or 'a list'}'"
    if kind is NotificationType.GROUP_ACTIVITY:
        return f"new activity in '{data.get('list_title') or 'a list'}'"
    if kind is NotificationType.SUGGESTION:
        return "new lists you might be interested in"
    if kind is NotificationType.REMINDER:
        return str(data.get("reminder_text") or "you haven't created a list in a while")
    return DEFAULT_MESSAGE


def notification_title(noti_type: Any) -> str:
    kind = coerce_type(noti_type)
    if kind is None:
        return DEFAULT_TITLE
    return NOTIFICATION_TITLES[kind]
