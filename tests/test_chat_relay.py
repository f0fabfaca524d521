"""Realtime chat over /ws: join, history replay, presence and the global Chat broadcast."""
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import select

from wkn.api.v1 import ws_chat
from wkn.core.db import AsyncSessionLocal
from wkn.core.errors import StorageError
from wkn.models import ChatMessage
from wkn.runtime.relay import ChatRelay
from wkn.schemas.chat import InitialMessagesOut
from wkn.services.chat_service import ChatService

from conftest import sync_engine


def join_room(ws, room_id):
    """Join a room and return (history, users) from the two frames that follow."""
    ws.send_json({"type": "joinRoom", "roomId": room_id})
    initial = ws.receive_json()
    assert initial["type"] == "initialMessages"
    users = ws.receive_json()
    assert users["type"] == "updateUsers"
    return initial["messages"], users["users"]


def chat(ws, username, message, room_id):
    ws.send_json({"type": "Chat", "username": username, "message": message, "chatroom": room_id})


def seed_messages(rows):
    with sync_engine.begin() as conn:
        conn.execute(ChatMessage.__table__.insert(), rows)


def test_join_empty_room_replays_nothing(client):
    with client.websocket_connect("/ws") as ws:
        history, users = join_room(ws, "room1")

    assert history == []
    assert users == []


def test_chat_is_broadcast_to_every_client_not_just_the_room(client):
    with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
        join_room(ws1, "room1")
        join_room(ws2, "lobby")

        chat(ws1, "alice", "hi", "room1")

        sent = ws1.receive_json()
        seen_elsewhere = ws2.receive_json()

    assert sent["type"] == "Chat"
    assert sent["username"] == "alice"
    assert sent["message"] == "hi"
    assert sent["chatroom"] == "room1"
    assert isinstance(sent["id"], int)
    assert sent["timestamp"]
    assert seen_elsewhere == sent


def test_join_replays_history_and_pushes_presence_to_room(client):
    with client.websocket_connect("/ws") as ws_a:
        join_room(ws_a, "room1")
        chat(ws_a, "alice", "first", "room1")
        ws_a.receive_json()

        with client.websocket_connect("/ws") as ws_b:
            history, users = join_room(ws_b, "room1")
            pushed_to_a = ws_a.receive_json()

    assert [m["message"] for m in history] == ["first"]
    assert users == ["alice"]
    assert pushed_to_a == {"type": "updateUsers", "users": ["alice"]}


def test_replay_is_ordered_by_creation_time(client):
    seed_messages([
        {"username": "bob", "message": "second", "chatroom_id": "r", "timestamp": datetime(2024, 1, 1, 10, 0, 5)},
        {"username": "amy", "message": "first", "chatroom_id": "r", "timestamp": datetime(2024, 1, 1, 10, 0, 1)},
        {"username": "bob", "message": "third", "chatroom_id": "r", "timestamp": datetime(2024, 1, 1, 10, 0, 9)},
        {"username": "eve", "message": "other room", "chatroom_id": "s", "timestamp": datetime(2024, 1, 1, 10, 0, 0)},
    ])

    with client.websocket_connect("/ws") as ws:
        history, users = join_room(ws, "r")

    assert [m["message"] for m in history] == ["first", "second", "third"]
    assert sorted(users) == ["amy", "bob"]
    stamps = [m["timestamp"] for m in history]
    assert stamps == sorted(stamps)


def test_sent_message_lands_at_the_end_of_history(client):
    seed_messages([
        {"username": "amy", "message": "old", "chatroom_id": "r", "timestamp": datetime(2020, 1, 1)},
    ])

    with client.websocket_connect("/ws") as ws:
        join_room(ws, "r")
        chat(ws, "bob", "new", "r")
        sent = ws.receive_json()

    with client.websocket_connect("/ws") as ws:
        history, _ = join_room(ws, "r")

    assert history[-1]["id"] == sent["id"]
    assert history[-1]["timestamp"] >= history[0]["timestamp"]


def test_rejoin_moves_connection_without_leaving_a_trace(client):
    with client.websocket_connect("/ws") as ws1, client.websocket_connect("/ws") as ws2:
        join_room(ws1, "room1")
        join_room(ws1, "room2")

        join_room(ws2, "room1")
        chat(ws2, "bob", "ping", "room1")

        # ws1 is no longer a room1 subscriber, so no updateUsers arrives first
        assert ws1.receive_json()["type"] == "Chat"
        ws2.receive_json()


def test_failed_persistence_drops_the_message(client, monkeypatch):
    async def _fail(self, **kwargs):
        raise StorageError("database is gone")

    monkeypatch.setattr(ChatService, "send_message", _fail)

    with client.websocket_connect("/ws") as ws:
        join_room(ws, "room1")
        chat(ws, "alice", "lost", "room1")

        # no Chat echo and no error frame: the next frame is the join reply
        history, _ = join_room(ws, "room1")

    assert history == []


def test_malformed_frames_are_ignored(client):
    with client.websocket_connect("/ws") as ws:
        join_room(ws, "room1")
        ws.send_text("not json")
        ws.send_json({"type": "Chat", "username": "alice"})
        ws.send_json({"type": "typing"})
        chat(ws, "alice", "still here", "room1")

        msg = ws.receive_json()

    assert msg["type"] == "Chat"
    assert msg["message"] == "still here"
    with sync_engine.connect() as conn:
        stored = conn.execute(select(ChatMessage.message)).scalars().all()
    assert stored == ["still here"]


def test_join_releases_the_session_before_sending(client, monkeypatch):
    open_sessions = 0
    seen_at_send = []

    @asynccontextmanager
    async def counting_session():
        nonlocal open_sessions
        async with AsyncSessionLocal() as db:
            open_sessions += 1
            try:
                yield db
            finally:
                open_sessions -= 1

    real_send_to = ChatRelay.send_to

    async def recording_send_to(self, conn_id, model):
        if isinstance(model, InitialMessagesOut):
            seen_at_send.append(open_sessions)
        await real_send_to(self, conn_id, model)

    monkeypatch.setattr(ws_chat, "AsyncSessionLocal", counting_session)
    monkeypatch.setattr(ChatRelay, "send_to", recording_send_to)

    with client.websocket_connect("/ws") as ws:
        join_room(ws, "room1")

    assert seen_at_send == [0]
