import json
from datetime import datetime, timezone

from connectlist.core.rows import (
    category_key,
    decode_data,
    display_category,
    map_list_row,
    map_list_rows,
    map_notification_row,
    map_profile_row,
    profile_from_auth_user,
)

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def list_row(n_items=5, **extra):
    row = {
        "id": "l1",
        "title": "Favorites",
        "description": "",
        "category": "movies",
        "is_public": True,
        "created_at": "2026-10-19T11:58:00+00:00",
        "list_items": [{"id": f"i{i}", "title": f"Item {i}", "image_url": None, "year": 2000 + i} for i in range(n_items)],
        "list_likes": [{"user_id": "u1"}, {"user_id": "u2"}],
        "list_comments": [{"id": "c1"}],
    }
    row.update(extra)
    return row


def test_preview_is_first_three_with_overflow():
    item = map_list_row(list_row(5), now=NOW)
    assert len(item.previewItems) == 3
    assert [p.id for p in item.previewItems] == ["i0", "i1", "i2"]
    assert item.itemsCount == 5
    assert item.moreCount == 2


def test_description_fallback_uses_items_count():
    item = map_list_row(list_row(4), now=NOW)
    assert item.description == "4 items in this list"


def test_stored_description_is_kept():
    item = map_list_row(list_row(1, description="Best ever"), now=NOW)
    assert item.description == "Best ever"


def test_counts_timestamp_and_source():
    item = map_list_row(list_row(2), source="liked_list", now=NOW)
    assert item.likes == 2
    assert item.comments == 1
    assert item.timestamp == "2m ago"
    assert item.type == "liked_list"
    assert item.moreCount == 0
    assert item.previewItems[1].year == "2001"


def test_category_display_names():
    assert display_category("movies") == "Movies"
    assert display_category("PLACES") == "Places"
    assert display_category("podcasts") == "podcasts"
    assert display_category(None) == "General"
    assert display_category("") == "General"


def test_category_key():
    assert category_key("Movies") == "movies"
    assert category_key("unknown") is None
    assert category_key(None) is None


def test_sparse_row_does_not_raise():
    item = map_list_row({}, now=NOW)
    assert item.title == ""
    assert item.description == "0 items in this list"
    assert item.category == "General"
    assert item.likes == item.comments == item.itemsCount == 0
    assert item.timestamp == ""
    assert item.author is None


def test_non_string_values_are_coerced():
    row = list_row(
        1,
        title=123,
        category=5,
        description=7,
        profiles={"id": "alice", "username": 42, "full_name": 9},
    )
    row["list_items"][0]["title"] = 2001
    item = map_list_row(row, now=NOW)
    assert item.title == "123"
    assert item.category == "5"
    assert item.description == "7"
    assert item.previewItems[0].title == "2001"
    assert item.author.username == "42"
    assert display_category(5) == "5"

    profile = map_profile_row({"RowKey": "bob", "full_name": 1, "bio": 2, "username": "bob"})
    assert profile.fullName == "1"
    assert profile.bio == "2"


def test_author_is_mapped_when_joined():
    row = list_row(1, profiles={"id": "alice", "username": "alice", "full_name": "Alice", "avatar_url": "https://x/a.png"})
    item = map_list_row(row, now=NOW)
    assert item.author.fullName == "Alice"
    assert item.author.avatar == "https://x/a.png"


def test_map_list_rows_skips_missing_rows():
    items = map_list_rows([list_row(1), None, {}], now=NOW)
    assert len(items) == 1


def test_profile_row():
    row = {
        "RowKey": "alice",
        "full_name": "",
        "name": "Alice",
        "username": "alice",
        "avatar_key": "alice.png",
        "followers_count": 7,
    }
    view = map_profile_row(row, storage_base_url="https://s.example.com")
    assert view.id == "alice"
    assert view.fullName == "Alice"
    assert view.username == "@alice"
    assert view.avatar == "https://s.example.com/avatars/alice.png"
    assert view.stats.followers == 7
    assert view.stats.lists == 0


def test_profile_row_falls_back_to_auth_avatar():
    view = map_profile_row({"id": "u"}, auth_user={"user_metadata": {"picture": "https://g/p.png"}})
    assert view.fullName == "User"
    assert view.username == ""
    assert view.avatar == "https://g/p.png"


def test_profile_from_auth_user():
    view = profile_from_auth_user({"sub": "u1", "email": "jane@example.com", "user_metadata": {}})
    assert view.fullName == "jane"
    assert view.username == "jane"
    assert view.avatar is None

    named = profile_from_auth_user({"sub": "u1", "user_metadata": {"name": "Jane", "avatar_url": "https://a/j.png"}})
    assert named.fullName == "Jane"
    assert named.avatar == "https://a/j.png"

    assert profile_from_auth_user(None).fullName == "User"


def test_notification_row():
    row = {
        "RowKey": "n1",
        "type": "follow",
        "read": False,
        "createdAt": "2026-10-19T10:00:00+00:00",
        "data": json.dumps({"list_image_url": "https://img/x.png"}),
    }
    actor = {"id": "bob", "full_name": "Bob", "username": "bob", "avatar_url": "https://cdn/b.png"}
    view = map_notification_row(row, actor=actor, now=NOW)
    assert view.id == "n1"
    assert view.message == "started following you"
    assert view.time == "2h"
    assert view.isNew is True
    assert view.user.name == "Bob"
    assert view.user.avatar == "https://cdn/b.png"
    assert view.listImage == "https://img/x.png"
    assert view.actionButton == "Follow Back"


def test_notification_row_without_actor_or_payload():
    view = map_notification_row({"RowKey": "n2", "type": "mystery", "read": True, "data": "{broken"}, now=NOW)
    assert view.user.name == "Unknown User"
    assert view.message == "interacted with your content"
    assert view.isNew is False
    assert view.data == {}
    assert view.actionButton is None


def test_decode_data():
    assert decode_data('{"a": 1}') == {"a": 1}
    assert decode_data({"a": 1}) == {"a": 1}
    assert decode_data("[1, 2]") == {}
    assert decode_data(None) == {}
