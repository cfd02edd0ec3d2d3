"""News API client for fetching top headlines."""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError

from newsbrief.config import Settings
from newsbrief.schemas.article import Article
from newsbrief.services.errors import HTTP_CLIENT_ERRORS, map_news_error

logger = logging.getLogger(__name__)


def _total_results(value: Any) -> int:
    """Upstream total as an int, 0 when it is missing or not numeric."""
    if isinstance(value, bool):
        return 0
    try:
        return int(value or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


@dataclass
class HeadlineBatch:
    """Eligible headlines plus the counts reported by the news backend."""

    articles: list[Article] = field(default_factory=list)
    total_results: int = 0
    received: int = 0


class NewsApiClient:
    """Fetches top headlines and keeps only articles with usable body text."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self.url = settings.news_api_url
        self.http_client = http_client or httpx.AsyncClient(
            timeout=settings.news_timeout_seconds,
            headers={"X-Api-Key": settings.news_api_key},
        )

    async def fetch_headlines(
        self,
        country: str | None = None,
        category: str | None = None,
    ) -> HeadlineBatch:
        """
        Fetch top headlines for a country and category.

        Args:
            country: Two-letter country code, defaults to the configured country
            category: News category, defaults to the configured category

        Returns:
            HeadlineBatch with eligible articles in upstream order

        Raises:
            UpstreamError: when the news backend is unreachable, times out or
                rejects the request
        """
        params = {
            "country": country or self.settings.default_country,
            "category": category or self.settings.default_category,
            "pageSize": self.settings.news_page_size,
        }

        try:
            resp = await self.http_client.get(
                self.url, params=params, timeout=self.settings.news_timeout_seconds
            )
            resp.raise_for_status()
            data = resp.json()
        except (*HTTP_CLIENT_ERRORS, ValueError) as e:
            error = map_news_error(e)
            logger.error("News API request failed: %s", error.message)
            raise error from e

        if not isinstance(data, dict):
            raise map_news_error(ValueError("News API payload is not an object"))

        records = data.get("articles")
        if not isinstance(records, list):
            records = []
        eligible = [a for a in self._parse_records(records) if a.is_eligible]

        logger.info(
            "Fetched %d headlines for %s/%s, %d eligible",
            len(records),
            params["country"],
            params["category"],
            len(eligible),
        )
        return HeadlineBatch(
            articles=eligible,
            total_results=_total_results(data.get("totalResults")),
            received=len(records),
        )

    def _parse_records(self, records: list[Any]) -> list[Article]:
        articles = []
        for record in records:
            if not isinstance(record, dict):
                continue
            try:
                articles.append(Article.from_news_api(record))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed News API record %r: %s",
                    record.get("url") or record.get("title"),
                    e.errors()[0]["msg"],
                )
        return articles

    async def close(self) -> None:
        """Close HTTP client."""
        await self.http_client.aclose()
