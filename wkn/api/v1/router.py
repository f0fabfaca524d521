from fastapi import APIRouter
from wkn.api.v1 import auth, chatrooms, news, posts

router = APIRouter()
router.include_router(chatrooms.router, tags=["chatrooms"])
router.include_router(auth.router, tags=["auth"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
router.include_router(news.router, prefix="/news", tags=["news"])
