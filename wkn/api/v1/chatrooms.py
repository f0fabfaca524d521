from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wkn.core import get_db
from wkn.services.chat_service import ChatService

router = APIRouter()


@router.get("/chatrooms", response_model=list[str])
async def list_chatrooms(db: AsyncSession = Depends(get_db)) -> list[str]:
    return await ChatService(db).list_rooms()


@router.get("/chatrooms/{room_id}/users", response_model=list[str])
async def list_room_users(room_id: str, db: AsyncSession = Depends(get_db)) -> list[str]:
    return await ChatService(db).presence(room_id)


@router.get("/users/{username}/chatrooms", response_model=list[str])
async def list_user_chatrooms(username: str, db: AsyncSession = Depends(get_db)) -> list[str]:
    return await ChatService(db).rooms_for_user(username)
