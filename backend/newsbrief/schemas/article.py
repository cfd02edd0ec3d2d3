"""Article schemas for headlines, summaries and API request/response validation."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

UNKNOWN_SOURCE = "Unknown"


class Article(BaseModel):
    """A normalized headline as returned by the news backend."""

    title: str | None = None
    description: str | None = None
    content: str | None = None
    url: str | None = Field(default=None, description="URL of the original article, used as its id")
    image_url: str | None = None
    source_name: str = UNKNOWN_SOURCE
    published_at: datetime | None = None

    @property
    def body(self) -> str | None:
        """Body text to summarize, preferring full content over the description."""
        return self.content or self.description or None

    @property
    def is_eligible(self) -> bool:
        """Whether the article has a title and some body text."""
        return bool(self.title and self.body)

    def summary_input(self, max_chars: int) -> str:
        """Title and body joined, cut to ``max_chars`` characters."""
        return f"{self.title}. {self.body}"[:max_chars]

    @classmethod
    def from_news_api(cls, record: dict[str, Any]) -> "Article":
        """Build an article from a raw News API record."""
        source = record.get("source")
        if not isinstance(source, dict):
            source = {}
        return cls(
            title=record.get("title"),
            description=record.get("description"),
            content=record.get("content"),
            url=record.get("url"),
            image_url=record.get("urlToImage"),
            source_name=source.get("name") or UNKNOWN_SOURCE,
            published_at=record.get("publishedAt"),
        )


class ArticleIn(BaseModel):
    """Article supplied by a client for batch summarization."""

    title: str | None = Field(default=None, max_length=1000)
    description: str | None = None
    content: str | None = None
    url: str | None = None
    image_url: str | None = None
    source_name: str | None = None
    published_at: datetime | None = None

    def to_article(self) -> Article:
        data = self.model_dump(exclude_none=True)
        return Article(**data)


class SummarizedArticleResponse(BaseModel):
    """One entry of a digest: a summary or a fallback explaining the failure."""

    id: str | None
    title: str | None
    source: str
    url: str | None
    image: str | None = None
    summary: str
    published_at: datetime | None = None
    description: str | None = None
    content: str | None = None
    error: str | None = Field(default=None, description="Error kind when summarization failed")


class DigestResponse(BaseModel):
    """Schema for the headline digest response."""

    message: str
    total_results: int
    articles: list[SummarizedArticleResponse]


class HeadlinesResponse(BaseModel):
    """Schema for the headlines-only response."""

    total_results: int
    articles: list[Article]


class BatchSummaryRequest(BaseModel):
    articles: list[ArticleIn] = Field(..., max_length=100)
    limit: int | None = Field(default=None, ge=1, le=20)


class BatchSummaryResponse(BaseModel):
    articles: list[SummarizedArticleResponse]


class SummaryRequest(BaseModel):
    """Schema for the on-demand summary of a single text."""

    text: str = Field(..., min_length=1)
    language: str | None = Field(default=None, max_length=40)


class SummaryResponse(BaseModel):
    summary: str
