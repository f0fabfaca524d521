from __future__ import annotations

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class PostUpdateIn(BaseModel):
    title: str
    content: str


class PostSummaryOut(BaseModel):
    id: int
    title: str
    author: str
    category: Optional[str] = None
    created_at: Optional[datetime] = None


class PostOut(BaseModel):
    title: str
    author: str
    content: str
    category: Optional[str] = None
    imageUrl: Optional[str] = None
    created_at: Optional[datetime] = None


class CommentIn(BaseModel):
    author: Optional[str] = None
    content: Optional[str] = None


class CommentUpdateIn(BaseModel):
    content: Optional[str] = None


class CommentOut(BaseModel):
    id: int
    post_id: int
    author: str
    content: str
    created_at: datetime
