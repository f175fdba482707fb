# connectlist/infra/table_client.py
import os
from typing import Any, Dict, List, Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.data.tables import TableServiceClient, UpdateMode

CONN_STR = os.getenv("AZURE_STORAGE_CONNECTION_STRING")
TABLE_PREFIX = os.getenv("TABLE_PREFIX", "")

# Table Storage solo admite nombres alfanuméricos
PROFILES = "profiles"
LISTS = "lists"
LIST_ITEMS = "listitems"
LIST_LIKES = "listlikes"
LIST_COMMENTS = "listcomments"
NOTIFICATIONS = "notifications"
FOLLOWS = "follows"

PROFILE_PARTITION = "profile"


def get_table_client(table_name: str):
    if not CONN_STR:
        raise RuntimeError("AZURE_STORAGE_CONNECTION_STRING is not configured")

    service = TableServiceClient.from_connection_string(conn_str=CONN_STR)
    return service.get_table_client(table_name=f"{TABLE_PREFIX}{table_name}")


def _query(table_name: str, query_filter: str, **parameters) -> List[Dict[str, Any]]:
    table_client = get_table_client(table_name)
    entities = table_client.query_entities(
        query_filter=query_filter,
        parameters=parameters,
    )
    return [dict(e) for e in entities]


def _partition(table_name: str, partition_key: str) -> List[Dict[str, Any]]:
    return _query(table_name, "PartitionKey eq @pk", pk=partition_key)


def _get(table_name: str, partition_key: str, row_key: str) -> Optional[Dict[str, Any]]:
    table_client = get_table_client(table_name)
    try:
        return dict(table_client.get_entity(partition_key=partition_key, row_key=row_key))
    except ResourceNotFoundError:
        return None


def _newest_first(rows: List[Dict[str, Any]], field: str = "created_at") -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda r: r.get(field) or "", reverse=True)


# ---------- profiles ----------

def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    row = _get(PROFILES, PROFILE_PARTITION, user_id)
    if row is not None:
        row.setdefault("id", user_id)
    return row


def upsert_profile(user_id: str, fields: Dict[str, Any]):
    table_client = get_table_client(PROFILES)
    entity = {"PartitionKey": PROFILE_PARTITION, "RowKey": user_id, **fields}
    table_client.upsert_entity(entity=entity, mode=UpdateMode.MERGE)


# ---------- lists ----------

def _list_row(entity: Dict[str, Any]) -> Dict[str, Any]:
    entity.setdefault("id", entity.get("RowKey"))
    entity.setdefault("user_id", entity.get("PartitionKey"))
    return entity


def get_list(owner_id: str, list_id: str) -> Optional[Dict[str, Any]]:
    row = _get(LISTS, owner_id, list_id)
    return _list_row(row) if row is not None else None


def get_lists_by_owner(owner_id: str, public_only: bool = True) -> List[Dict[str, Any]]:
    rows = [_list_row(r) for r in _partition(LISTS, owner_id)]
    if public_only:
        rows = [r for r in rows if r.get("is_public", True)]
    return _newest_first(rows)


def get_public_lists() -> List[Dict[str, Any]]:
    """Todas las listas públicas (cross-partition, más recientes primero)."""
    table_client = get_table_client(LISTS)
    rows = [_list_row(dict(e)) for e in table_client.list_entities()]
    return _newest_first([r for r in rows if r.get("is_public", True)])


def insert_list(entity: dict):
    table_client = get_table_client(LISTS)
    table_client.create_entity(entity=entity)


def get_list_items(list_id: str) -> List[Dict[str, Any]]:
    rows = _partition(LIST_ITEMS, list_id)
    for r in rows:
        r.setdefault("id", r.get("RowKey"))
    # los items conservan el orden en que se agregaron
    return sorted(rows, key=lambda r: (r.get("position") or 0, r.get("created_at") or ""))


def get_list_item(list_id: str, item_id: str) -> Optional[Dict[str, Any]]:
    return _get(LIST_ITEMS, list_id, item_id)


def insert_list_item(entity: dict):
    table_client = get_table_client(LIST_ITEMS)
    table_client.create_entity(entity=entity)


def delete_list_item(list_id: str, item_id: str):
    table_client = get_table_client(LIST_ITEMS)
    table_client.delete_entity(partition_key=list_id, row_key=item_id)


def get_list_likes(list_id: str) -> List[Dict[str, Any]]:
    rows = _partition(LIST_LIKES, list_id)
    for r in rows:
        r.setdefault("user_id", r.get("RowKey"))
    return rows


def get_likes_by_user(user_id: str) -> List[Dict[str, Any]]:
    return _newest_first(_query(LIST_LIKES, "RowKey eq @uid", uid=user_id))


def insert_like(list_id: str, owner_id: str, user_id: str, created_at: str):
    table_client = get_table_client(LIST_LIKES)
    table_client.upsert_entity(
        entity={
            "PartitionKey": list_id,
            "RowKey": user_id,
            "owner_id": owner_id,
            "created_at": created_at,
        },
        mode=UpdateMode.REPLACE,
    )


def delete_like(list_id: str, user_id: str):
    table_client = get_table_client(LIST_LIKES)
    table_client.delete_entity(partition_key=list_id, row_key=user_id)


def get_list_comments(list_id: str) -> List[Dict[str, Any]]:
    rows = _partition(LIST_COMMENTS, list_id)
    for r in rows:
        r.setdefault("id", r.get("RowKey"))
    return rows


def insert_comment(entity: dict):
    table_client = get_table_client(LIST_COMMENTS)
    table_client.create_entity(entity=entity)


# ---------- notifications ----------

def insert_notification(entity: dict):
    table_client = get_table_client(NOTIFICATIONS)
    table_client.create_entity(entity=entity)


def get_user_notifications(user_id: str, top: int = 50) -> List[Dict[str, Any]]:
    """Notificaciones del usuario (PartitionKey = user_id), más recientes primero."""
    notis = _newest_first(_partition(NOTIFICATIONS, user_id), field="createdAt")
    return notis[:top]


def mark_as_read(user_id: str, row_key: str):
    """
    Marca la notificación como leída.
    Hay que volver a mandar PartitionKey y RowKey en el dict.
    """
    table_client = get_table_client(NOTIFICATIONS)
    entity = table_client.get_entity(partition_key=user_id, row_key=row_key)
    entity["read"] = True
    table_client.update_entity(entity=entity, mode=UpdateMode.MERGE)


def mark_all_as_read(user_id: str) -> int:
    table_client = get_table_client(NOTIFICATIONS)
    updated = 0
    for entity in _partition(NOTIFICATIONS, user_id):
        if entity.get("read"):
            continue
        table_client.update_entity(
            entity={
                "PartitionKey": entity["PartitionKey"],
                "RowKey": entity["RowKey"],
                "read": True,
            },
            mode=UpdateMode.MERGE,
        )
        updated += 1
    return updated


def delete_notification(user_id: str, row_key: str):
    table_client = get_table_client(NOTIFICATIONS)
    table_client.delete_entity(partition_key=user_id, row_key=row_key)


def delete_notifications_before(user_id: str, cutoff: str) -> int:
    """Borra las notificaciones con createdAt anterior a `cutoff` (ISO-8601)."""
    deleted = 0
    for entity in _partition(NOTIFICATIONS, user_id):
        if (entity.get("createdAt") or "") < cutoff:
            delete_notification(user_id, entity["RowKey"])
            deleted += 1
    return deleted


# ---------- follows ----------

def get_follow(follower_id: str, following_id: str) -> Optional[Dict[str, Any]]:
    return _get(FOLLOWS, follower_id, following_id)


def insert_follow(follower_id: str, following_id: str, created_at: str):
    table_client = get_table_client(FOLLOWS)
    table_client.create_entity(
        entity={
            "PartitionKey": follower_id,
            "RowKey": following_id,
            "created_at": created_at,
        }
    )


def delete_follow(follower_id: str, following_id: str):
    table_client = get_table_client(FOLLOWS)
    table_client.delete_entity(partition_key=follower_id, row_key=following_id)
