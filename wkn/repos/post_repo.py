from __future__ import annotations

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core.db import execute
from wkn.models import Comment, Post


class PostRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        *,
        title: str,
        content: str,
        category: str | None,
        author: str,
        image_url: str | None,
    ) -> None:
        stmt = insert(Post).values(
            title=title,
            content=content,
            category=category,
            author=author,
            imageUrl=image_url,
        )
        await execute(self.db, stmt)

    async def list_posts(self) -> list[dict]:
        stmt = select(Post.id, Post.title, Post.author, Post.category, Post.created_at).order_by(Post.id.asc())
        return await execute(self.db, stmt)

    async def get(self, post_id: int) -> dict | None:
        stmt = select(
            Post.title,
            Post.author,
            Post.content,
            Post.category,
            Post.imageUrl,
            Post.created_at,
        ).where(Post.id == post_id)
        rows = await execute(self.db, stmt)
        return rows[0] if rows else None

    async def exists(self, post_id: int) -> bool:
        return bool(await execute(self.db, select(Post.id).where(Post.id == post_id)))

    async def update(self, post_id: int, *, title: str, content: str) -> bool:
        stmt = (
            update(Post)
            .where(Post.id == post_id)
            .values(
                title=title,
                content=content,
                updated_at=func.now(),
                created_at=func.coalesce(Post.created_at, func.now()),
            )
            .returning(Post.id)
        )
        return bool(await execute(self.db, stmt))

    async def delete(self, post_id: int) -> bool:
        rows = await execute(self.db, delete(Post).where(Post.id == post_id).returning(Post.id))
        return bool(rows)

    async def delete_by_author(self, author: str) -> None:
        await execute(self.db, delete(Post).where(Post.author == author))


class CommentRepo:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, *, post_id: int, author: str, content: str) -> None:
        await execute(self.db, insert(Comment).values(post_id=post_id, author=author, content=content))

    async def list_for_post(self, post_id: int) -> list[dict]:
        stmt = (
            select(Comment.id, Comment.post_id, Comment.author, Comment.content, Comment.created_at)
            .where(Comment.post_id == post_id)
            .order_by(Comment.id.asc())
        )
        return await execute(self.db, stmt)

    async def update(self, post_id: int, comment_id: int, *, content: str) -> bool:
        stmt = (
            update(Comment)
            .where(Comment.id == comment_id, Comment.post_id == post_id)
            .values(content=content)
            .returning(Comment.id)
        )
        return bool(await execute(self.db, stmt))

    async def delete(self, post_id: int, comment_id: int) -> bool:
        stmt = delete(Comment).where(Comment.id == comment_id, Comment.post_id == post_id).returning(Comment.id)
        return bool(await execute(self.db, stmt))

    async def delete_for_post(self, post_id: int) -> None:
        await execute(self.db, delete(Comment).where(Comment.post_id == post_id))

    async def delete_by_author(self, author: str) -> None:
        await execute(self.db, delete(Comment).where(Comment.author == author))

    async def delete_on_posts_by(self, author: str) -> None:
        posts_by_author = select(Post.id).where(Post.author == author)
        await execute(self.db, delete(Comment).where(Comment.post_id.in_(posts_by_author)))
