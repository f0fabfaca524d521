from typing import Any

from fastapi import APIRouter, Depends

from wkn.services.news_service import NewsService, get_news_service

router = APIRouter()


@router.get("")
async def get_news(category: str = "all", svc: NewsService = Depends(get_news_service)) -> Any:
    """Upstream JSON, returned untouched."""
    return await svc.top_headlines(category)
