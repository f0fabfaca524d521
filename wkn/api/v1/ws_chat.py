from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PayloadError

from wkn.core.db import AsyncSessionLocal
from wkn.core.errors import StorageError
from wkn.runtime.relay import relay
from wkn.schemas.chat import ChatSendIn, InitialMessagesOut, JoinRoomIn, UpdateUsersOut
from wkn.services.chat_service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat-ws"])


async def _join_room(conn_id: str, room_id: str) -> None:
    relay.join(conn_id, room_id)
    logger.info("connection %s joined room %s", conn_id, room_id)

    # read everything first; the session goes back to the pool before any socket I/O
    users = None
    async with AsyncSessionLocal() as db:
        svc = ChatService(db)
        try:
            history = await svc.replay(room_id)
        except StorageError:
            logger.exception("history replay failed for room %s", room_id)
            return
        try:
            users = await svc.presence(room_id)
        except StorageError:
            logger.exception("presence lookup failed for room %s", room_id)

    await relay.send_to(conn_id, InitialMessagesOut(messages=history))
    if users is not None:
        await relay.broadcast_room(room_id, UpdateUsersOut(users=users))


async def _send_chat(chat_in: ChatSendIn) -> None:
    async with AsyncSessionLocal() as db:
        try:
            stored = await ChatService(db).send_message(
                username=chat_in.username,
                message=chat_in.message,
                room_id=chat_in.chatroom,
            )
        except StorageError:
            # no retry and no nack; the sender just never sees its echo
            logger.exception("dropping chat message from %s to room %s", chat_in.username, chat_in.chatroom)
            return
    await relay.dispatch_chat(stored)


@router.websocket("/ws")
async def chat_ws(websocket: WebSocket):
    await websocket.accept()
    conn_id = relay.connect(websocket)
    logger.info("connection %s opened", conn_id)

    try:
        while True:
            raw = await websocket.receive_text()

            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                continue
            if not isinstance(data, dict):
                continue

            kind = data.get("type")
            if kind == "joinRoom":
                try:
                    join_in = JoinRoomIn(**data)
                except PayloadError:
                    logger.debug("ignoring malformed joinRoom from %s", conn_id)
                    continue
                await _join_room(conn_id, join_in.roomId)

            elif kind == "Chat":
                try:
                    chat_in = ChatSendIn(**data)
                except PayloadError:
                    logger.debug("ignoring malformed Chat from %s", conn_id)
                    continue
                await _send_chat(chat_in)

            # other event types are ignored

    except WebSocketDisconnect:
        pass
    finally:
        relay.disconnect(conn_id)
        logger.info("connection %s closed", conn_id)
