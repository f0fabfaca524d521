"""Room listings derived from stored chat rows."""
from datetime import datetime

from wkn.models import ChatMessage

from conftest import sync_engine


def seed(rows):
    with sync_engine.begin() as conn:
        conn.execute(
            ChatMessage.__table__.insert(),
            [
                {"username": u, "message": m, "chatroom_id": r, "timestamp": datetime(2024, 5, 1, 12, 0, i)}
                for i, (u, r, m) in enumerate(rows)
            ],
        )


def test_no_messages_means_no_rooms(client):
    assert client.get("/api/chatrooms").json() == []
    assert client.get("/api/chatrooms/room1/users").json() == []


def test_rooms_are_distinct_room_ids_of_stored_messages(client):
    seed([
        ("alice", "room1", "a"),
        ("bob", "room2", "b"),
        ("alice", "room1", "c"),
        ("carol", "room3", "d"),
    ])

    assert client.get("/api/chatrooms").json() == ["room1", "room2", "room3"]


def test_room_users_are_distinct_posters(client):
    seed([
        ("alice", "room1", "a"),
        ("bob", "room1", "b"),
        ("alice", "room1", "c"),
        ("carol", "room2", "d"),
    ])

    users = client.get("/api/chatrooms/room1/users").json()
    assert sorted(users) == ["alice", "bob"]
    # asking twice changes nothing
    assert client.get("/api/chatrooms/room1/users").json() == users


def test_rooms_for_user(client):
    seed([
        ("alice", "room1", "a"),
        ("alice", "room2", "b"),
        ("bob", "room3", "c"),
        ("alice", "room1", "d"),
    ])

    assert client.get("/api/users/alice/chatrooms").json() == ["room1", "room2"]
    assert client.get("/api/users/nobody/chatrooms").json() == []
