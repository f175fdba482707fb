# connectlist/core/rows.py
"""
Filas del backend -> view-models listos para pintar.

Todo aquí es puro y total: a una fila incompleta le corresponden valores
por defecto, nunca una excepción.
"""
import json
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from connectlist.core.avatars import resolve_avatar_url
from connectlist.core.messages import NotificationType, coerce_type, format_notification_message
from connectlist.core.timefmt import format_time_ago
from connectlist.models.list_feed import CommentView, ListDetail, ListFeedItem, ListItemView
from connectlist.models.notification import NotificationUser, NotificationView
from connectlist.models.profile import AuthorSummary, ProfileStats, ProfileView

PREVIEW_SIZE = 3
DEFAULT_CATEGORY = "General"

CATEGORY_NAMES = {
    "movies": "Movies",
    "series": "Series",
    "books": "Books",
    "games": "Games",
    "people": "People",
    "videos": "Videos",
    "places": "Places",
}


def display_category(category: Optional[str]) -> str:
    if not category:
        return DEFAULT_CATEGORY
    return CATEGORY_NAMES.get(str(category).lower(), str(category))


def category_key(name: Optional[str]) -> Optional[str]:
    """'Movies' (o 'movies') -> 'movies'; None si no es una categoría conocida."""
    if not name:
        return None
    lowered = str(name).lower()
    return lowered if lowered in CATEGORY_NAMES else None


def decode_data(raw: Any) -> Dict[str, Any]:
    """El payload se guarda como JSON string; uno inválido vale {}."""
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (str, bytes)) and raw:
        try:
            value = json.loads(raw)
        except ValueError:
            return {}
        return value if isinstance(value, dict) else {}
    return {}


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _position(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def map_list_item(row: Mapping[str, Any]) -> ListItemView:
    return ListItemView(
        id=_text(row.get("id") or row.get("RowKey")),
        externalId=_text(row.get("external_id")),
        title=_text(row.get("title")) or "",
        imageUrl=_text(row.get("image_url")),
        type=_text(row.get("type")),
        year=_text(row.get("year")),
        description=_text(row.get("description")),
        position=_position(row.get("position")),
    )


def map_author(
    row: Optional[Mapping[str, Any]], storage_base_url: Optional[str] = None
) -> Optional[AuthorSummary]:
    if not row:
        return None
    return AuthorSummary(
        id=_text(row.get("id") or row.get("RowKey")),
        username=_text(row.get("username")) or "",
        fullName=_text(row.get("full_name") or row.get("name")) or "",
        avatar=resolve_avatar_url(row, storage_base_url=storage_base_url),
    )


def map_list_row(
    row: Mapping[str, Any],
    source: str = "feed",
    now: Optional[datetime] = None,
    storage_base_url: Optional[str] = None,
) -> ListFeedItem:
    """
    Una fila de `lists` con sus colecciones unidas (list_items, list_likes,
    list_comments y opcionalmente el perfil del dueño en `profiles`) ->
    tarjeta del feed.
    """
    items = _as_list(row.get("list_items"))
    items_count = len(items)
    preview = [map_list_item(item) for item in items[:PREVIEW_SIZE] if isinstance(item, Mapping)]

    return ListFeedItem(
        id=_text(row.get("id") or row.get("RowKey")),
        type=source,
        title=_text(row.get("title")) or "",
        description=_text(row.get("description")) or f"{items_count} items in this list",
        category=display_category(row.get("category")),
        likes=len(_as_list(row.get("list_likes"))),
        comments=len(_as_list(row.get("list_comments"))),
        timestamp=format_time_ago(row.get("created_at"), now=now, suffix=True),
        previewItems=preview,
        itemsCount=items_count,
        moreCount=max(items_count - PREVIEW_SIZE, 0),
        isPublic=bool(row.get("is_public", True)),
        createdAt=_text(row.get("created_at")),
        author=map_author(row.get("profiles"), storage_base_url),
    )


def map_list_rows(
    rows: Iterable[Optional[Mapping[str, Any]]],
    source: str = "feed",
    now: Optional[datetime] = None,
    storage_base_url: Optional[str] = None,
) -> List[ListFeedItem]:
    # las filas vacías (p.ej. un like a una lista borrada) se saltan
    return [
        map_list_row(row, source=source, now=now, storage_base_url=storage_base_url)
        for row in rows
        if row
    ]


def map_comment_row(
    row: Mapping[str, Any],
    now: Optional[datetime] = None,
    storage_base_url: Optional[str] = None,
) -> CommentView:
    """El perfil del autor viaja unido en `profiles`, como en las listas."""
    return CommentView(
        id=_text(row.get("id") or row.get("RowKey")),
        text=_text(row.get("text")) or "",
        timestamp=format_time_ago(row.get("created_at"), now=now, suffix=True),
        createdAt=_text(row.get("created_at")),
        user=map_author(row.get("profiles"), storage_base_url),
    )


def map_list_detail(
    row: Mapping[str, Any],
    viewer_id: Optional[str] = None,
    now: Optional[datetime] = None,
    storage_base_url: Optional[str] = None,
) -> ListDetail:
    card = map_list_row(row, source="detail", now=now, storage_base_url=storage_base_url)
    likes = _as_list(row.get("list_likes"))

    return ListDetail(
        **card.model_dump(),
        items=[map_list_item(item) for item in _as_list(row.get("list_items")) if isinstance(item, Mapping)],
        commentList=[
            map_comment_row(c, now=now, storage_base_url=storage_base_url)
            for c in _as_list(row.get("list_comments"))
            if isinstance(c, Mapping)
        ],
        isLiked=bool(viewer_id) and any(
            isinstance(like, Mapping) and like.get("user_id") == viewer_id for like in likes
        ),
        isOwner=bool(viewer_id) and viewer_id == row.get("user_id"),
    )


def map_profile_row(
    row: Mapping[str, Any],
    auth_user: Optional[Mapping[str, Any]] = None,
    storage_base_url: Optional[str] = None,
) -> ProfileView:
    metadata = (auth_user or {}).get("user_metadata") or {}
    username = row.get("username")

    return ProfileView(
        id=_text(row.get("id") or row.get("RowKey")),
        fullName=_text(row.get("full_name") or row.get("name")) or "User",
        username=f"@{username}" if username else "",
        bio=_text(row.get("bio")) or "",
        location=_text(row.get("location")) or "",
        title=_text(row.get("title")) or "",
        company=_text(row.get("company")) or "",
        avatar=resolve_avatar_url(row, auth_metadata=metadata, storage_base_url=storage_base_url),
        stats=ProfileStats(
            lists=row.get("lists_count") or 0,
            likedLists=row.get("liked_lists_count") or 0,
            followers=row.get("followers_count") or 0,
            following=row.get("following_count") or 0,
        ),
    )


def profile_from_auth_user(auth_user: Optional[Mapping[str, Any]]) -> ProfileView:
    """Perfil mínimo cuando no existe fila en `profiles`."""
    auth_user = auth_user or {}
    metadata = auth_user.get("user_metadata") or {}
    email = auth_user.get("email") or ""
    local_part = email.split("@")[0] if email else ""

    return ProfileView(
        id=_text(auth_user.get("sub")),
        fullName=metadata.get("full_name") or metadata.get("name") or local_part or "User",
        username=local_part,
        avatar=metadata.get("avatar_url") or metadata.get("picture") or None,
    )


def map_notification_row(
    row: Mapping[str, Any],
    actor: Optional[Mapping[str, Any]] = None,
    now: Optional[datetime] = None,
    storage_base_url: Optional[str] = None,
) -> NotificationView:
    data = decode_data(row.get("data"))
    actor = actor or {}
    noti_type = str(row.get("type") or "")

    return NotificationView(
        id=_text(row.get("RowKey") or row.get("id")) or "",
        type=noti_type,
        user=NotificationUser(
            id=_text(actor.get("id") or actor.get("RowKey")),
            name=_text(actor.get("full_name")) or "Unknown User",
            username=_text(actor.get("username")) or "",
            avatar=resolve_avatar_url(actor, storage_base_url=storage_base_url),
        ),
        message=format_notification_message(noti_type, data),
        time=format_time_ago(row.get("createdAt") or row.get("created_at"), now=now),
        isNew=not bool(row.get("read") or row.get("is_read")),
        data=data,
        listImage=_text(data.get("list_image_url")),
        actionButton="Follow Back" if coerce_type(noti_type) is NotificationType.FOLLOW else None,
    )
