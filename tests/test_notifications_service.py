import json
from datetime import datetime, timezone

import pytest

from connectlist.infra import table_client
from connectlist.services.error_reporter import ErrorReporter
from connectlist.services.interactions import ListNotFoundError, add_comment, like_list, share_list, unlike_list
from connectlist.services.notifications import (
    cleanup_old_notifications,
    count_unread,
    get_notification_feed,
    get_notification_stats,
)

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


def noti(row_key, noti_type, created_at, read=False, actor="bob", data=None):
    return {
        "PartitionKey": "alice",
        "RowKey": row_key,
        "type": noti_type,
        "actorId": actor,
        "title": "t",
        "message": "m",
        "read": read,
        "createdAt": created_at,
        "data": json.dumps(data or {}),
    }


@pytest.fixture
def inbox(seeded):
    seeded.seed(
        table_client.NOTIFICATIONS,
        noti("n1", "like", "2026-10-19T11:59:15+00:00", data={"list_title": "Favorites"}),
        noti("n2", "follow", "2026-10-19T09:00:00+00:00", read=True),
        noti("n3", "comment", "2026-08-01T00:00:00+00:00", data={"comment_text": "x" * 40}),
    )
    return seeded


def test_feed_is_newest_first_with_actor(inbox):
    feed = get_notification_feed("alice", now=NOW)
    assert [n.id for n in feed] == ["n1", "n2", "n3"]
    assert feed[0].message == 'liked your list "Favorites"'
    assert feed[0].time == "45s"
    assert feed[0].user.username == "bob"
    assert feed[1].actionButton == "Follow Back"
    assert feed[1].isNew is False
    assert feed[2].message == f'commented on your list: "{"x" * 30}..."'


def test_stats(inbox):
    stats = get_notification_stats("alice")
    assert stats.total == 3
    assert stats.unread == 2
    assert stats.byType["follow"].total == 1
    assert stats.byType["follow"].unread == 0
    assert stats.byType["like"].unread == 1
    assert count_unread("alice") == 2


def test_mark_all_as_read(inbox):
    assert table_client.mark_all_as_read("alice") == 2
    assert count_unread("alice") == 0


def test_cleanup_removes_old_ones(inbox):
    assert cleanup_old_notifications("alice", now=NOW) == 1
    assert [n.id for n in get_notification_feed("alice", now=NOW)] == ["n1", "n2"]


def test_failures_render_empty(broken_tables):
    reporter = ErrorReporter()
    assert get_notification_feed("alice", reporter=reporter) == []
    assert get_notification_stats("alice", reporter=reporter).total == 0
    assert reporter.captured == 2


@pytest.mark.asyncio
async def test_like_list_notifies_owner(seeded):
    await like_list("alice", "l1", "carol")
    likes = [r["RowKey"] for r in seeded.rows(table_client.LIST_LIKES)]
    assert sorted(likes) == ["bob", "carol"]
    (notification,) = seeded.rows(table_client.NOTIFICATIONS)
    assert notification["PartitionKey"] == "alice"
    assert notification["message"] == 'liked your list "Favorites"'


@pytest.mark.asyncio
async def test_owner_liking_own_list_is_silent(seeded):
    await like_list("alice", "l1", "alice")
    assert seeded.rows(table_client.NOTIFICATIONS) == []


@pytest.mark.asyncio
async def test_like_missing_list(seeded):
    with pytest.raises(ListNotFoundError):
        await like_list("alice", "nope", "bob")


def test_unlike(seeded):
    unlike_list("l1", "bob")
    assert seeded.rows(table_client.LIST_LIKES) == []


@pytest.mark.asyncio
async def test_comment_notifies_owner(seeded):
    comment = await add_comment("alice", "l1", "bob", "Loved the third pick on this list!")
    assert comment["PartitionKey"] == "l1"
    (notification,) = seeded.rows(table_client.NOTIFICATIONS)
    assert notification["type"] == "comment"
    assert notification["message"] == 'commented on your list: "Loved the third pick on this l..."'


@pytest.mark.asyncio
async def test_share_list(seeded):
    sent = await share_list("alice", "l1", ["bob", "carol", "alice"])
    assert sorted(e["PartitionKey"] for e in sent) == ["bob", "carol"]


@pytest.mark.asyncio
async def test_comment_is_kept_when_notification_fails(seeded, broken_notifications):
    comment = await add_comment("alice", "l1", "bob", "Still here")
    stored = [r["RowKey"] for r in seeded.rows(table_client.LIST_COMMENTS)]
    assert comment["RowKey"] in stored
    assert seeded.rows(table_client.NOTIFICATIONS) == []
