"""Shared fixtures for the Newsbrief test suite."""

from collections.abc import Callable

import httpx
import pytest

from newsbrief.config import Settings
from newsbrief.schemas.article import Article


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        news_api_key="news-key",
        gemini_api_key="gemini-key",
        jwt_secret="test-secret-with-enough-length-for-hs256",
        database_url="sqlite+aiosqlite:///:memory:",
        log_level="WARNING",
    )


@pytest.fixture
def make_http_client() -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler``."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory


def make_article(n: int = 1, **overrides: object) -> Article:
    data: dict[str, object] = {
        "title": f"Headline {n}",
        "content": f"Body of article {n}",
        "url": f"https://news.example.com/{n}",
        "image_url": f"https://img.example.com/{n}.jpg",
        "source_name": "Example Times",
    }
    data.update(overrides)
    return Article(**data)


def gemini_text(text: str, finish_reason: str = "STOP") -> dict:
    return {
        "candidates": [
            {"content": {"parts": [{"text": text}], "role": "model"}, "finishReason": finish_reason}
        ]
    }
