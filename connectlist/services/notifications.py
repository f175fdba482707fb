# connectlist/services/notifications.py
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from azure.core.exceptions import AzureError

from connectlist.core.rows import map_notification_row
from connectlist.infra import table_client as tables
from connectlist.models.notification import NotificationStats, NotificationView, TypeStats
from connectlist.services.error_reporter import ErrorReporter, report_database_error

RETENTION_DAYS = 30


def get_notification_feed(
    user_id: str,
    now: Optional[datetime] = None,
    reporter: Optional[ErrorReporter] = None,
) -> List[NotificationView]:
    """
    Las últimas notificaciones del usuario con el perfil del actor resuelto.
    Si el backend falla se devuelve una lista vacía.
    """
    try:
        rows = tables.get_user_notifications(user_id)
        actors: Dict[str, Optional[Dict[str, Any]]] = {}
        for row in rows:
            actor_id = row.get("actorId")
            if actor_id and actor_id not in actors:
                actors[actor_id] = tables.get_profile(actor_id)
    except AzureError as e:
        report_database_error(reporter, e, query=f"notifications:{user_id}", table=tables.NOTIFICATIONS)
        return []

    return [
        map_notification_row(row, actor=actors.get(row.get("actorId")), now=now)
        for row in rows
    ]


def get_notification_stats(
    user_id: str, reporter: Optional[ErrorReporter] = None
) -> NotificationStats:
    try:
        rows = tables.get_user_notifications(user_id, top=1000)
    except AzureError as e:
        report_database_error(reporter, e, query=f"notification_stats:{user_id}", table=tables.NOTIFICATIONS)
        return NotificationStats()

    stats = NotificationStats(total=len(rows))
    for row in rows:
        is_unread = not row.get("read", False)
        by_type = stats.byType.setdefault(str(row.get("type") or ""), TypeStats())
        by_type.total += 1
        if is_unread:
            stats.unread += 1
            by_type.unread += 1
    return stats


def count_unread(user_id: str, reporter: Optional[ErrorReporter] = None) -> int:
    return get_notification_stats(user_id, reporter=reporter).unread


def cleanup_old_notifications(
    user_id: str, days: int = RETENTION_DAYS, now: Optional[datetime] = None
) -> int:
    current = now or datetime.now(timezone.utc)
    cutoff = (current - timedelta(days=days)).isoformat()
    return tables.delete_notifications_before(user_id, cutoff)
