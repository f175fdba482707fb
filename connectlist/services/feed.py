# connectlist/services/feed.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from azure.core.exceptions import AzureError

from connectlist.core.rows import category_key, map_list_rows
from connectlist.infra import table_client as tables
from connectlist.models.list_feed import ListFeedItem
from connectlist.services.error_reporter import ErrorReporter, report_database_error


PROFILE_LIST_LIMIT = 20
FEED_PAGE_SIZE = 10


def hydrate_list(row: Dict[str, Any], with_author: bool = False) -> Dict[str, Any]:
    """Une a la fila de `lists` sus items, likes, comentarios (y el dueño)."""
    list_id = row.get("id") or row.get("RowKey")
    hydrated = dict(row)
    hydrated["list_items"] = tables.get_list_items(list_id)
    hydrated["list_likes"] = tables.get_list_likes(list_id)
    hydrated["list_comments"] = tables.get_list_comments(list_id)
    if with_author and row.get("user_id"):
        hydrated["profiles"] = tables.get_profile(row["user_id"])
    return hydrated


def get_home_feed(
    category: Optional[str] = None,
    offset: int = 0,
    page_size: int = FEED_PAGE_SIZE,
    now: Optional[datetime] = None,
    reporter: Optional[ErrorReporter] = None,
) -> List[ListFeedItem]:
    """
    Página del feed principal: listas públicas de todos, más recientes
    primero. Una categoría desconocida no filtra.
    """
    try:
        rows = tables.get_public_lists()
        key = category_key(category)
        if key:
            rows = [r for r in rows if str(r.get("category") or "").lower() == key]
        page = [hydrate_list(r, with_author=True) for r in rows[offset:offset + page_size]]
    except AzureError as e:
        report_database_error(reporter, e, query="home_feed", table=tables.LISTS)
        return []
    return map_list_rows(page, source="feed", now=now)


def get_user_lists(
    owner_id: str,
    now: Optional[datetime] = None,
    reporter: Optional[ErrorReporter] = None,
) -> List[ListFeedItem]:
    try:
        rows = tables.get_lists_by_owner(owner_id)[:PROFILE_LIST_LIMIT]
        hydrated = [hydrate_list(r) for r in rows]
    except AzureError as e:
        report_database_error(reporter, e, query=f"user_lists:{owner_id}", table=tables.LISTS)
        return []
    return map_list_rows(hydrated, source="user_list", now=now)


def get_category_lists(
    owner_id: str,
    category: str,
    now: Optional[datetime] = None,
    reporter: Optional[ErrorReporter] = None,
) -> List[ListFeedItem]:
    key = category_key(category)
    if key is None:
        return []
    try:
        rows = [
            r for r in tables.get_lists_by_owner(owner_id)
            if str(r.get("category") or "").lower() == key
        ][:PROFILE_LIST_LIMIT]
        hydrated = [hydrate_list(r) for r in rows]
    except AzureError as e:
        report_database_error(reporter, e, query=f"category_lists:{owner_id}:{key}", table=tables.LISTS)
        return []
    return map_list_rows(hydrated, source="category_list", now=now)


def get_liked_lists(
    user_id: str,
    now: Optional[datetime] = None,
    reporter: Optional[ErrorReporter] = None,
) -> List[ListFeedItem]:
    try:
        likes = tables.get_likes_by_user(user_id)[:PROFILE_LIST_LIMIT]
        hydrated = []
        for like in likes:
            row = tables.get_list(like.get("owner_id") or "", like["PartitionKey"])
            if row is None:
                # la lista fue borrada después del like
                continue
            hydrated.append(hydrate_list(row, with_author=True))
    except AzureError as e:
        report_database_error(reporter, e, query=f"liked_lists:{user_id}", table=tables.LIST_LIKES)
        return []
    return map_list_rows(hydrated, source="liked_list", now=now)
