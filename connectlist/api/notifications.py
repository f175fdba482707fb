# connectlist/api/notifications.py
from typing import Any, Dict, List, Optional

from azure.core.exceptions import AzureError, ResourceNotFoundError
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel

from connectlist.api.deps import get_reporter, get_ws_manager
from connectlist.infra.servicebus_consumer import consumer_status
from connectlist.infra.table_client import mark_all_as_read, mark_as_read
from connectlist.models.notification import NotificationStats, NotificationView
from connectlist.security.jwt_utils import current_user
from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.notification_handler import process_notification
from connectlist.services.notifications import (
    RETENTION_DAYS,
    cleanup_old_notifications,
    count_unread,
    get_notification_feed,
    get_notification_stats,
)
from connectlist.services.websocket_manager import WebSocketManager

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationView])
async def list_notifications(
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    """Feed de notificaciones del usuario del JWT (más recientes primero)."""
    return get_notification_feed(current["sub"], reporter=reporter)


@router.get("/unread-count")
async def unread_count(
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return {"count": count_unread(current["sub"], reporter=reporter)}


@router.get("/stats", response_model=NotificationStats)
async def notification_stats(
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    return get_notification_stats(current["sub"], reporter=reporter)


@router.post("/mark-read/{notification_id}")
async def mark_notification_as_read(
    notification_id: str,
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    """
    Marca una notificación como leída.
    Usa el user_id (sub) del JWT y el RowKey de la notificación.
    """
    try:
        mark_as_read(current["sub"], notification_id)
    except ResourceNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found")
    except AzureError as e:
        reporter.capture_database_error(e, query=f"mark_read:{notification_id}", table="notifications")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not mark notification as read: {e}",
        )
    return {"ok": True}


@router.post("/mark-all-read")
async def mark_all_notifications_as_read(
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    try:
        updated = mark_all_as_read(current["sub"])
    except AzureError as e:
        reporter.capture_database_error(e, query="mark_all_read", table="notifications")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not update notifications: {e}",
        )
    return {"ok": True, "updated": updated}


@router.post("/cleanup")
async def cleanup_notifications(
    days: int = Query(RETENTION_DAYS, ge=1),
    current: dict = Depends(current_user),
    reporter: ErrorReporter = Depends(get_reporter),
):
    """Borra las notificaciones del usuario más viejas que `days` días."""
    try:
        deleted = cleanup_old_notifications(current["sub"], days=days)
    except AzureError as e:
        reporter.capture_database_error(e, query="cleanup", table="notifications")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not clean up notifications: {e}",
        )
    return {"ok": True, "deleted": deleted}


# =========================
# DEV-ONLY: /notifications/dev-send
# Notificación arbitraria (persistencia + WS) para pruebas.
# Si no se manda userId en el body se usa el del token (sub).
# =========================

class DevSendIn(BaseModel):
    type: str
    userId: Optional[str] = None
    actorId: Optional[str] = None
    targetId: Optional[str] = None
    data: Optional[Dict[str, Any]] = None


@router.post("/dev-send")
async def dev_send(
    body: DevSendIn,
    current: dict = Depends(current_user),
    ws_manager: WebSocketManager = Depends(get_ws_manager),
):
    msg = {
        "type": body.type,
        "userId": body.userId or current["sub"],
        "actorId": body.actorId,
        "targetId": body.targetId,
        "data": body.data or {},
    }
    entity = await process_notification(msg, ws_manager)
    return {"ok": entity is not None, "id": entity["RowKey"] if entity else None}


@router.get("/debug/consumer-status")
async def debug_consumer_status():
    """
    Estado del consumer de Service Bus:
    startedAt, lastMessageAt, lastError, processed, queue, hasConnectionString.
    """
    return consumer_status()
