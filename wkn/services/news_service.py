from __future__ import annotations

import logging
from typing import Any

import httpx

from wkn.core import settings
from wkn.core.errors import DomainError

logger = logging.getLogger(__name__)


class NewsService:
    """Pass-through client for the headline news API."""

    def __init__(self, client: httpx.AsyncClient | None = None):
        self.client = client

    def _params(self, category: str) -> dict[str, str]:
        params = {"country": settings.NEWS_COUNTRY, "apiKey": settings.NEWS_API_KEY}
        if category != "all":
            params["category"] = category
        return params

    async def top_headlines(self, category: str = "all") -> Any:
        logger.info("fetching news for category %s", category)
        try:
            if self.client is not None:
                resp = await self.client.get(settings.NEWS_API_URL, params=self._params(category))
            else:
                async with httpx.AsyncClient(timeout=settings.NEWS_TIMEOUT_SECONDS) as client:
                    resp = await client.get(settings.NEWS_API_URL, params=self._params(category))
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("news request failed: %s", e)
            raise DomainError("failed to fetch news") from e


def get_news_service() -> NewsService:
    return NewsService()
