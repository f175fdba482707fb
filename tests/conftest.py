from typing import Dict, Tuple

import jwt
import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError, ServiceRequestError
from azure.data.tables import UpdateMode
from fastapi.testclient import TestClient

from connectlist.infra import table_client
from connectlist.security.jwt_utils import JWT_ALG, JWT_SECRET


class FakeTableClient:
    """TableClient en memoria con la parte de la API que usa el proyecto."""

    def __init__(self, name: str):
        self.name = name
        self.rows: Dict[Tuple[str, str], dict] = {}

    @staticmethod
    def _key(entity):
        return (entity["PartitionKey"], entity["RowKey"])

    def create_entity(self, entity):
        key = self._key(entity)
        if key in self.rows:
            raise ResourceExistsError(f"{self.name}{key} already exists")
        self.rows[key] = dict(entity)

    def upsert_entity(self, entity, mode=UpdateMode.MERGE):
        key = self._key(entity)
        if mode == UpdateMode.MERGE and key in self.rows:
            self.rows[key].update(entity)
        else:
            self.rows[key] = dict(entity)

    def update_entity(self, entity, mode=UpdateMode.MERGE):
        key = self._key(entity)
        if key not in self.rows:
            raise ResourceNotFoundError(f"{self.name}{key} not found")
        if mode == UpdateMode.MERGE:
            self.rows[key].update(entity)
        else:
            self.rows[key] = dict(entity)

    def get_entity(self, partition_key, row_key):
        try:
            return dict(self.rows[(partition_key, row_key)])
        except KeyError:
            raise ResourceNotFoundError(f"{self.name}({partition_key}, {row_key}) not found")

    def delete_entity(self, partition_key, row_key):
        self.rows.pop((partition_key, row_key), None)

    def list_entities(self):
        return [dict(r) for r in self.rows.values()]

    def query_entities(self, query_filter, parameters=None):
        parameters = parameters or {}
        conditions = []
        for clause in query_filter.split(" and "):
            field, op, value = clause.strip().split(" ", 2)
            assert op == "eq", f"unsupported operator in {query_filter!r}"
            conditions.append((field, parameters[value.lstrip("@")]))
        return [
            dict(r) for r in self.rows.values()
            if all(r.get(field) == value for field, value in conditions)
        ]


class FakeTableStore:
    def __init__(self):
        self.tables: Dict[str, FakeTableClient] = {}

    def get(self, table_name: str) -> FakeTableClient:
        return self.tables.setdefault(table_name, FakeTableClient(table_name))

    def seed(self, table_name: str, *entities):
        for entity in entities:
            self.get(table_name).create_entity(entity)

    def rows(self, table_name: str):
        return list(self.get(table_name).rows.values())


def _broken_table(table_name):
    raise ServiceRequestError("table service unreachable")


def _failing_write(*args, **kwargs):
    raise ServiceRequestError("table write failed")


@pytest.fixture
def tables(monkeypatch):
    store = FakeTableStore()
    monkeypatch.setattr(table_client, "get_table_client", store.get)
    return store


@pytest.fixture
def broken_tables(monkeypatch):
    monkeypatch.setattr(table_client, "get_table_client", _broken_table)


@pytest.fixture
def broken_notifications(tables, monkeypatch):
    """Solo la tabla de notificaciones falla al escribir."""
    monkeypatch.setattr(tables.get(table_client.NOTIFICATIONS), "create_entity", _failing_write)
    return tables


def make_token(sub: str, **claims) -> str:
    return jwt.encode({"sub": sub, **claims}, JWT_SECRET, algorithm=JWT_ALG)


def auth_headers(sub: str, **claims) -> dict:
    return {"Authorization": f"Bearer {make_token(sub, **claims)}"}


@pytest.fixture
def client(tables):
    from connectlist.main import app

    with TestClient(app) as c:
        yield c


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.accepted = False
        self.closed = False
        self.sent = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)

    async def close(self):
        self.closed = True


@pytest.fixture
def seeded(tables):
    """Dos usuarios, una lista con 5 items, likes y comentarios."""
    tables.seed(
        table_client.PROFILES,
        {
            "PartitionKey": "profile", "RowKey": "alice", "full_name": "Alice Doe",
            "username": "alice", "avatar_url": "https://cdn.example.com/alice.png",
            "bio": "I make lists", "followers_count": 3, "following_count": 1,
            "lists_count": 2,
        },
        {
            "PartitionKey": "profile", "RowKey": "bob", "full_name": "Bob Roe",
            "username": "bob", "avatar_path": "bob/face.jpg",
        },
    )
    tables.seed(
        table_client.LISTS,
        {
            "PartitionKey": "alice", "RowKey": "l1", "title": "Favorites",
            "description": "", "category": "movies", "is_public": True,
            "created_at": "2026-10-18T12:00:00+00:00",
        },
        {
            "PartitionKey": "alice", "RowKey": "l2", "title": "Reads",
            "description": "Books to read", "category": "books", "is_public": True,
            "created_at": "2026-10-19T09:00:00+00:00",
        },
        {
            "PartitionKey": "alice", "RowKey": "l3", "title": "Secret",
            "category": "places", "is_public": False,
            "created_at": "2026-10-19T10:00:00+00:00",
        },
    )
    tables.seed(
        table_client.LIST_ITEMS,
        *[
            {"PartitionKey": "l1", "RowKey": f"i{n}", "title": f"Movie {n}", "type": "movie", "position": n}
            for n in range(5)
        ],
    )
    tables.seed(
        table_client.LIST_LIKES,
        {"PartitionKey": "l1", "RowKey": "bob", "owner_id": "alice", "created_at": "2026-10-18T13:00:00+00:00"},
    )
    tables.seed(
        table_client.LIST_COMMENTS,
        {"PartitionKey": "l1", "RowKey": "c1", "user_id": "bob", "text": "nice"},
        {"PartitionKey": "l1", "RowKey": "c2", "user_id": "bob", "text": "very nice"},
    )
    return tables
