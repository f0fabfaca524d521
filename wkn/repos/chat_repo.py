from __future__ import annotations

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core.db import execute
from wkn.models import ChatMessage


class ChatRepo:
    """
    Chat rows are the only record of rooms: a room exists exactly while at
    least one message carries its id.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, *, username: str, message: str, chatroom_id: str) -> dict:
        stmt = (
            insert(ChatMessage)
            .values(username=username, message=message, chatroom_id=chatroom_id)
            .returning(
                ChatMessage.id,
                ChatMessage.username,
                ChatMessage.message,
                ChatMessage.chatroom_id,
                ChatMessage.timestamp,
            )
        )
        rows = await execute(self.db, stmt)
        return rows[0]

    async def history(self, chatroom_id: str) -> list[dict]:
        stmt = (
            select(
                ChatMessage.id,
                ChatMessage.username,
                ChatMessage.message,
                ChatMessage.chatroom_id,
                ChatMessage.timestamp,
            )
            .where(ChatMessage.chatroom_id == chatroom_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
        )
        return await execute(self.db, stmt)

    async def usernames_in_room(self, chatroom_id: str) -> list[str]:
        stmt = (
            select(ChatMessage.username)
            .where(ChatMessage.chatroom_id == chatroom_id)
            .group_by(ChatMessage.username)
            .order_by(func.min(ChatMessage.id))
        )
        return [row["username"] for row in await execute(self.db, stmt)]

    async def list_rooms(self) -> list[str]:
        stmt = (
            select(ChatMessage.chatroom_id)
            .group_by(ChatMessage.chatroom_id)
            .order_by(func.min(ChatMessage.id))
        )
        return [row["chatroom_id"] for row in await execute(self.db, stmt)]

    async def rooms_for_user(self, username: str) -> list[str]:
        stmt = (
            select(ChatMessage.chatroom_id)
            .where(ChatMessage.username == username)
            .group_by(ChatMessage.chatroom_id)
            .order_by(func.min(ChatMessage.id))
        )
        return [row["chatroom_id"] for row in await execute(self.db, stmt)]

    async def delete_by_username(self, username: str) -> None:
        await execute(self.db, delete(ChatMessage).where(ChatMessage.username == username))
