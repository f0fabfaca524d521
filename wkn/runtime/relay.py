from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


@dataclass
class Connection:
    websocket: WebSocket
    room_id: Optional[str] = None    # None until the first joinRoom


@dataclass
class ChatRelay:
    """
    Live realtime connections and the room each one last joined.

    A connection belongs to at most one room. Joining another room replaces
    the association without notifying the room it left.
    """
    connections: Dict[str, Connection] = field(default_factory=dict)

    def connect(self, websocket: WebSocket) -> str:
        conn_id = str(uuid.uuid4())
        self.connections[conn_id] = Connection(websocket=websocket)
        return conn_id

    def join(self, conn_id: str, room_id: str) -> None:
        conn = self.connections.get(conn_id)
        if conn is None:
            logger.warning("join for unknown connection %s (room %s) ignored", conn_id, room_id)
            return
        if conn.room_id is not None and conn.room_id != room_id:
            logger.debug("connection %s moves from room %s to %s", conn_id, conn.room_id, room_id)
        conn.room_id = room_id

    def disconnect(self, conn_id: str) -> None:
        self.connections.pop(conn_id, None)

    def room_of(self, conn_id: str) -> Optional[str]:
        conn = self.connections.get(conn_id)
        return conn.room_id if conn else None

    def subscribers(self, room_id: str) -> list[str]:
        return [cid for cid, conn in self.connections.items() if conn.room_id == room_id]

    async def send_to(self, conn_id: str, model: Any) -> None:
        conn = self.connections.get(conn_id)
        if conn is None:
            return
        await conn.websocket.send_json(jsonable_encoder(model))

    async def broadcast_room(self, room_id: str, model: Any) -> None:
        await self._broadcast(self.subscribers(room_id), model)

    async def dispatch_chat(self, model: Any) -> None:
        """
        Deliver a stored chat message.

        Goes to every connected client, whatever room it joined. Room scoping
        would be `broadcast_room(model.chatroom, model)`.
        """
        await self._broadcast(list(self.connections), model)

    async def _broadcast(self, conn_ids: list[str], model: Any) -> None:
        payload = jsonable_encoder(model)
        dead: list[str] = []

        for conn_id in conn_ids:
            conn = self.connections.get(conn_id)
            if conn is None:
                continue
            try:
                await conn.websocket.send_json(payload)
            except Exception as e:
                logger.warning("dropping connection %s after failed send: %s", conn_id, e)
                dead.append(conn_id)

        for conn_id in dead:
            conn = self.connections.pop(conn_id, None)
            if conn is None:
                continue
            # closing ends the endpoint's receive loop, which then cleans up
            try:
                await conn.websocket.close()
            except Exception as e:
                logger.debug("close failed for dropped connection %s: %s", conn_id, e)

    def clear(self) -> None:
        self.connections.clear()


# single relay per process
relay = ChatRelay()
