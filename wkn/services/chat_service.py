from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core.db import unit_of_work
from wkn.repos.chat_repo import ChatRepo
from wkn.schemas.chat import ChatMessageOut

logger = logging.getLogger(__name__)


def _to_message_out(row: dict) -> ChatMessageOut:
    return ChatMessageOut(
        id=row["id"],
        username=row["username"],
        message=row["message"],
        chatroom=row["chatroom_id"],
        timestamp=row["timestamp"],
    )


class ChatService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.chat = ChatRepo(db)

    async def replay(self, room_id: str) -> list[ChatMessageOut]:
        """Every stored message of a room, oldest first. Unbounded."""
        rows = await self.chat.history(room_id)
        return [_to_message_out(row) for row in rows]

    async def presence(self, room_id: str) -> list[str]:
        """Usernames that have ever posted in the room (not a liveness signal)."""
        return await self.chat.usernames_in_room(room_id)

    async def list_rooms(self) -> list[str]:
        return await self.chat.list_rooms()

    async def rooms_for_user(self, username: str) -> list[str]:
        return await self.chat.rooms_for_user(username)

    async def send_message(self, *, username: str, message: str, room_id: str) -> ChatMessageOut:
        async with unit_of_work(self.db):
            row = await self.chat.insert(username=username, message=message, chatroom_id=room_id)
        logger.info("chat message %s stored in room %s", row["id"], room_id)
        return _to_message_out(row)
