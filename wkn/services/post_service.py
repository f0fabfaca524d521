from __future__ import annotations

import logging

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core.db import unit_of_work
from wkn.core.errors import NotFoundError, ValidationError
from wkn.repos.post_repo import CommentRepo, PostRepo
from wkn.schemas.post import CommentOut, PostOut, PostSummaryOut
from wkn.services.storage_service import StorageService

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, db: AsyncSession, storage: StorageService | None = None):
        self.db = db
        self.posts = PostRepo(db)
        self.comments = CommentRepo(db)
        self.storage = storage

    async def create_post(
        self,
        *,
        title: str | None,
        content: str | None,
        category: str | None,
        author: str | None,
        image: UploadFile | None = None,
    ) -> None:
        """
        Store a post and, when given, its image.

        The image is written before the row; a failed insert leaves an
        unreferenced file behind.
        """
        missing = [name for name, value in (("title", title), ("content", content), ("author", author)) if not value]
        if missing:
            raise ValidationError(f"missing required field(s): {', '.join(missing)}")

        image_url = None
        if image is not None and image.filename:
            stored = await self.storage.save_upload(image, accept="image/")
            image_url = stored.url

        async with unit_of_work(self.db):
            await self.posts.create(
                title=title,
                content=content,
                category=category,
                author=author,
                image_url=image_url,
            )
        logger.info("post created by %s", author)

    async def list_posts(self) -> list[PostSummaryOut]:
        return [PostSummaryOut(**row) for row in await self.posts.list_posts()]

    async def get_post(self, post_id: int) -> PostOut:
        row = await self.posts.get(post_id)
        if row is None:
            raise NotFoundError("post not found")
        return PostOut(**row)

    async def update_post(self, post_id: int, *, title: str, content: str) -> None:
        async with unit_of_work(self.db):
            updated = await self.posts.update(post_id, title=title, content=content)
            if not updated:
                raise NotFoundError("post not found")

    async def delete_post(self, post_id: int) -> None:
        async with unit_of_work(self.db):
            await self.comments.delete_for_post(post_id)
            deleted = await self.posts.delete(post_id)
            if not deleted:
                raise NotFoundError("post not found")

    # ---------- comments ----------

    async def add_comment(self, post_id: int, *, author: str | None, content: str | None) -> None:
        if not author or not content:
            raise ValidationError("author and content are required")
        if not await self.posts.exists(post_id):
            raise NotFoundError("post not found")
        async with unit_of_work(self.db):
            await self.comments.create(post_id=post_id, author=author, content=content)

    async def list_comments(self, post_id: int) -> list[CommentOut]:
        if not await self.posts.exists(post_id):
            raise NotFoundError("post not found")
        return [CommentOut(**row) for row in await self.comments.list_for_post(post_id)]

    async def update_comment(self, post_id: int, comment_id: int, *, content: str | None) -> None:
        if not content:
            raise ValidationError("content is required")
        async with unit_of_work(self.db):
            if not await self.comments.update(post_id, comment_id, content=content):
                raise NotFoundError("comment not found")

    async def delete_comment(self, post_id: int, comment_id: int) -> None:
        async with unit_of_work(self.db):
            if not await self.comments.delete(post_id, comment_id):
                raise NotFoundError("comment not found")
