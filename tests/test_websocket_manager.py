import pytest

from conftest import FakeSocket
from connectlist.services.websocket_manager import WebSocketManager


@pytest.mark.asyncio
async def test_sends_to_every_connection_of_the_user():
    manager = WebSocketManager()
    phone, tablet = FakeSocket(), FakeSocket()
    await manager.connect("alice", phone)
    await manager.connect("alice", tablet)

    assert phone.accepted and tablet.accepted
    assert await manager.send_to_user("alice", {"hello": 1}) == 2
    assert phone.sent == tablet.sent == [{"hello": 1}]


@pytest.mark.asyncio
async def test_unknown_user_gets_nothing():
    assert await WebSocketManager().send_to_user("nobody", {}) == 0


@pytest.mark.asyncio
async def test_dead_sockets_are_dropped():
    manager = WebSocketManager()
    dead = FakeSocket(fail=True)
    await manager.connect("alice", dead)

    assert await manager.send_to_user("alice", {"x": 1}) == 0
    assert not manager.is_connected("alice")


@pytest.mark.asyncio
async def test_disconnect_and_close_all():
    manager = WebSocketManager()
    a, b = FakeSocket(), FakeSocket()
    await manager.connect("alice", a)
    await manager.connect("bob", b)

    manager.disconnect("alice", a)
    manager.disconnect("alice", a)
    assert not manager.is_connected("alice")

    await manager.close_all()
    assert b.closed
    assert manager.active_connections == {}
