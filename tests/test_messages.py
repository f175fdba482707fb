import pytest

from connectlist.core.messages import (
    DEFAULT_MESSAGE,
    NotificationType,
    format_notification_message,
    notification_title,
)


def test_like_message():
    assert format_notification_message("like", {"list_title": "Favorites"}) == 'liked your list "Favorites"'


def test_like_without_title():
    assert format_notification_message("like", {}) == 'liked your list "your list"'


def test_comment_is_truncated_to_thirty_chars():
    text = "a" * 31
    assert format_notification_message("comment", {"comment_text": text}) == (
        f'commented on your list: "{"a" * 30}..."'
    )


def test_comment_at_limit_is_untouched():
    text = "b" * 30
    assert format_notification_message("comment", {"comment_text": text}) == f'commented on your list: "{text}"'


def test_comment_fallback():
    assert format_notification_message("comment", None) == 'commented on your list: "Great list!"'


@pytest.mark.parametrize("noti_type,payload,expected", [
    ("follow", {}, "started following you"),
    ("message", {}, "sent you a message"),
    ("list_share", {"list_title": "Trip"}, "added you to 'Trip'"),
    ("list_share", {}, "added you to 'a list'"),
    ("group_activity", {"list_title": "Trip"}, "new activity in 'Trip'"),
    ("group_activity", {}, "new activity in 'a list'"),
    ("suggestion", {}, "new lists you might be interested in"),
    ("reminder", {"reminder_text": "Finish your list"}, "Finish your list"),
    ("reminder", {}, "you haven't created a list in a while"),
])
def test_every_type(noti_type, payload, expected):
    assert format_notification_message(noti_type, payload) == expected


def test_accepts_enum_members():
    assert format_notification_message(NotificationType.FOLLOW) == "started following you"


@pytest.mark.parametrize("noti_type,payload", [
    ("poke", {}),
    (None, None),
    (42, "not a mapping"),
    (["like"], {"list_title": "x"}),
])
def test_unknown_type_falls_back(noti_type, payload):
    assert format_notification_message(noti_type, payload) == DEFAULT_MESSAGE


def test_titles():
    assert notification_title("follow") == "New Follower"
    assert notification_title("whatever") == "Notification"
    assert all(notification_title(t) for t in NotificationType)
