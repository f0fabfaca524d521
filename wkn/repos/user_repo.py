from __future__ import annotations

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core.db import execute
from wkn.models import User


class UserRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_email(self, email: str) -> dict | None:
        rows = await execute(self.db, select(User.id, User.username, User.password, User.email).where(User.email == email))
        return rows[0] if rows else None

    async def exists(self, *, username: str, email: str) -> bool:
        stmt = select(User.id).where(or_(User.username == username, User.email == email)).limit(1)
        return bool(await execute(self.db, stmt))

    async def create(self, *, username: str, password_hash: str, email: str) -> None:
        await execute(self.db, insert(User).values(username=username, password=password_hash, email=email))

    async def update_password(self, email: str, password_hash: str) -> None:
        await execute(self.db, update(User).where(User.email == email).values(password=password_hash))

    async def delete_by_email(self, email: str) -> None:
        await execute(self.db, delete(User).where(User.email == email))
