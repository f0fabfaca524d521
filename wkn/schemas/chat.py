from __future__ import annotations

from datetime import datetime
from typing import List, Literal
from pydantic import BaseModel


# ---- client -> server ----

class JoinRoomIn(BaseModel):
    type: Literal["joinRoom"] = "joinRoom"
    roomId: str


class ChatSendIn(BaseModel):
    type: Literal["Chat"] = "Chat"
    username: str
    message: str
    chatroom: str


# ---- server -> clients ----

class ChatMessageOut(BaseModel):
    type: Literal["Chat"] = "Chat"
    id: int
    username: str
    message: str
    chatroom: str
    timestamp: datetime


class InitialMessagesOut(BaseModel):
    type: Literal["initialMessages"] = "initialMessages"
    messages: List[ChatMessageOut] = []


class UpdateUsersOut(BaseModel):
    type: Literal["updateUsers"] = "updateUsers"
    users: List[str] = []
