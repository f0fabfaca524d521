from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core import get_db
from wkn.schemas.auth import MessageOut
from wkn.schemas.post import CommentIn, CommentOut, CommentUpdateIn, PostOut, PostSummaryOut, PostUpdateIn
from wkn.services.post_service import PostService
from wkn.services.storage_service import StorageService

router = APIRouter()


def get_storage() -> StorageService:
    return StorageService()


def get_post_service(
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage),
) -> PostService:
    return PostService(db, storage=storage)


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    author: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    svc: PostService = Depends(get_post_service),
) -> MessageOut:
    await svc.create_post(
        title=title,
        content=content,
        category=category,
        author=author,
        image=image,
    )
    return MessageOut(message="post saved")


@router.get("", response_model=list[PostSummaryOut])
async def list_posts(svc: PostService = Depends(get_post_service)) -> list[PostSummaryOut]:
    return await svc.list_posts()


@router.get("/{post_id}", response_model=PostOut)
async def get_post(post_id: int, svc: PostService = Depends(get_post_service)) -> PostOut:
    return await svc.get_post(post_id)


@router.put("/{post_id}", response_model=MessageOut)
async def update_post(
    post_id: int,
    body: PostUpdateIn,
    svc: PostService = Depends(get_post_service),
) -> MessageOut:
    await svc.update_post(post_id, title=body.title, content=body.content)
    return MessageOut(message="post updated")


@router.delete("/{post_id}", response_model=MessageOut)
async def delete_post(post_id: int, svc: PostService = Depends(get_post_service)) -> MessageOut:
    await svc.delete_post(post_id)
    return MessageOut(message="post deleted")


# ---- comments ----

@router.post("/{post_id}/comments", response_model=MessageOut)
async def add_comment(
    post_id: int,
    body: CommentIn,
    svc: PostService = Depends(get_post_service),
) -> MessageOut:
    await svc.add_comment(post_id, author=body.author, content=body.content)
    return MessageOut(message="comment saved")


@router.get("/{post_id}/comments", response_model=list[CommentOut])
async def list_comments(post_id: int, svc: PostService = Depends(get_post_service)) -> list[CommentOut]:
    return await svc.list_comments(post_id)


@router.put("/{post_id}/comments/{comment_id}", response_model=MessageOut)
async def update_comment(
    post_id: int,
    comment_id: int,
    body: CommentUpdateIn,
    svc: PostService = Depends(get_post_service),
) -> MessageOut:
    await svc.update_comment(post_id, comment_id, content=body.content)
    return MessageOut(message="comment updated")


@router.delete("/{post_id}/comments/{comment_id}", response_model=MessageOut)
async def delete_comment(
    post_id: int,
    comment_id: int,
    svc: PostService = Depends(get_post_service),
) -> MessageOut:
    await svc.delete_comment(post_id, comment_id)
    return MessageOut(message="comment deleted")
