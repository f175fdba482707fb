# connectlist/services/lists.py
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from connectlist.core.rows import category_key, map_list_detail
from connectlist.infra import table_client as tables
from connectlist.models.list_feed import ListDetail
from connectlist.services.feed import hydrate_list
from connectlist.services.interactions import require_list

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500


class ItemNotFoundError(LookupError):
    pass


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _without_nulls(entity: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in entity.items() if v is not None}


def create_list(
    owner_id: str,
    title: str,
    category: str,
    description: str = "",
    is_public: bool = True,
    items: Iterable[Dict[str, Any]] = (),
) -> Dict[str, Any]:
    """Crea la lista (PartitionKey = dueño) y le agrega los items iniciales."""
    key = category_key(category)
    if key is None:
        raise ValueError(f"unknown category: {category}")

    created_at = _now()
    entity = {
        "PartitionKey": owner_id,
        "RowKey": str(uuid.uuid4()),
        "title": title.strip()[:MAX_TITLE_LENGTH],
        "description": (description or "").strip()[:MAX_DESCRIPTION_LENGTH],
        "category": key,
        "is_public": is_public,
        "created_at": created_at,
        "updated_at": created_at,
    }
    tables.insert_list(entity)
    add_items(entity["RowKey"], items)
    return entity


def add_items(list_id: str, items: Iterable[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], int]:
    """
    Agrega items al final de la lista. Un item cuyo external_id ya está
    en la lista se salta. Devuelve (items agregados, cantidad salteada).
    """
    existing = tables.get_list_items(list_id)
    seen = {r.get("external_id") for r in existing if r.get("external_id")}
    position = max((r.get("position") or 0 for r in existing), default=0)

    added, skipped = [], 0
    for item in items:
        external_id = item.get("external_id")
        if external_id and external_id in seen:
            skipped += 1
            continue

        position += 1
        year = item.get("year")
        entity = _without_nulls({
            "PartitionKey": list_id,
            "RowKey": str(uuid.uuid4()),
            "external_id": external_id,
            "title": item.get("title") or "",
            "image_url": item.get("image_url"),
            "type": item.get("type"),
            "year": str(year) if year is not None else None,
            "description": item.get("description"),
            "position": position,
            "created_at": _now(),
        })
        tables.insert_list_item(entity)
        if external_id:
            seen.add(external_id)
        added.append(entity)
    return added, skipped


def add_items_to_list(
    owner_id: str, list_id: str, items: Iterable[Dict[str, Any]]
) -> Tuple[List[Dict[str, Any]], int]:
    require_list(owner_id, list_id)
    return add_items(list_id, items)


def remove_item(owner_id: str, list_id: str, item_id: str):
    require_list(owner_id, list_id)
    if tables.get_list_item(list_id, item_id) is None:
        raise ItemNotFoundError(f"item {item_id} not in list {list_id}")
    tables.delete_list_item(list_id, item_id)


def get_list_detail(
    owner_id: str,
    list_id: str,
    viewer_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[ListDetail]:
    """
    Una lista completa: todos sus items en orden, likes y comentarios
    con su autor. Las privadas solo las ve el dueño; None si no existe.
    """
    row = tables.get_list(owner_id, list_id)
    if row is None:
        return None
    if not row.get("is_public", True) and viewer_id != owner_id:
        return None

    hydrated = hydrate_list(row, with_author=True)
    authors: Dict[str, Optional[Dict[str, Any]]] = {}
    comments = []
    for comment in hydrated["list_comments"]:
        user_id = comment.get("user_id")
        if user_id and user_id not in authors:
            authors[user_id] = tables.get_profile(user_id)
        comments.append({**comment, "profiles": authors.get(user_id)})
    hydrated["list_comments"] = sorted(comments, key=lambda c: c.get("created_at") or "")

    return map_list_detail(hydrated, viewer_id=viewer_id, now=now)
