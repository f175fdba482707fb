# connectlist/services/profiles.py
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from azure.core.exceptions import AzureError, ResourceExistsError

from connectlist.core.rows import map_profile_row, profile_from_auth_user
from connectlist.infra import table_client as tables
from connectlist.models.profile import ProfileView
from connectlist.services.error_reporter import ErrorReporter, report_database_error
from connectlist.services.notification_handler import send_follow_notification
from connectlist.services.websocket_manager import WebSocketManager


class SelfFollowError(ValueError):
    pass


def get_profile_view(
    user_id: str,
    auth_user: Optional[Dict[str, Any]] = None,
    reporter: Optional[ErrorReporter] = None,
) -> Optional[ProfileView]:
    """
    Perfil listo para pintar. Los datos del proveedor de auth (nombre,
    avatar) solo se usan cuando el usuario mira su propio perfil.
    Devuelve None si el perfil no existe y no es el propio.
    """
    is_own = bool(auth_user) and auth_user.get("sub") == user_id
    try:
        row = tables.get_profile(user_id)
    except AzureError as e:
        report_database_error(reporter, e, query=f"profile:{user_id}", table=tables.PROFILES)
        row = None

    if row is None:
        return profile_from_auth_user(auth_user) if is_own else None

    return map_profile_row(row, auth_user=auth_user if is_own else None)


def update_profile(user_id: str, fields: Dict[str, Any]) -> Optional[ProfileView]:
    fields = {k: v for k, v in fields.items() if v is not None}
    fields["updated_at"] = datetime.now(timezone.utc).isoformat()
    tables.upsert_profile(user_id, fields)
    row = tables.get_profile(user_id)
    return map_profile_row(row) if row is not None else None


def is_following(follower_id: str, following_id: str) -> bool:
    return tables.get_follow(follower_id, following_id) is not None


async def follow_user(
    follower_id: str,
    following_id: str,
    ws_manager: Optional[WebSocketManager] = None,
) -> bool:
    """
    Crea la arista follower -> following y avisa al seguido.
    Devuelve False si ya lo seguía.
    """
    if follower_id == following_id:
        raise SelfFollowError("users cannot follow themselves")

    try:
        tables.insert_follow(follower_id, following_id, datetime.now(timezone.utc).isoformat())
    except ResourceExistsError:
        return False

    await send_follow_notification(following_id, follower_id, ws_manager=ws_manager)
    return True


def unfollow_user(follower_id: str, following_id: str):
    tables.delete_follow(follower_id, following_id)
