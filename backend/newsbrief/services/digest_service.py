"""Digest service - fetches headlines and summarizes them concurrently."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from newsbrief.config import Settings
from newsbrief.schemas.article import Article, SummarizedArticleResponse
from newsbrief.services.errors import (
    ErrorKind,
    NewsbriefError,
    NoEligibleContentError,
    UpstreamError,
    fallback_message,
)
from newsbrief.services.news_client import HeadlineBatch

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE: int = Settings.model_fields["batch_size"].default
DEFAULT_MAX_INPUT_CHARS: int = Settings.model_fields["max_input_chars"].default


class HeadlineSource(Protocol):
    async def fetch_headlines(
        self, country: str | None = None, category: str | None = None
    ) -> HeadlineBatch: ...


class Summarizer(Protocol):
    async def summarize(self, text: str, language: str | None = None) -> str: ...


@dataclass
class SummarizationResult:
    """Outcome for one article: a summary, or a fallback message and its error kind."""

    article: Article
    summary: str
    error: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_response(self) -> SummarizedArticleResponse:
        article = self.article
        return SummarizedArticleResponse(
            id=article.url,
            title=article.title,
            source=article.source_name,
            url=article.url,
            image=article.image_url,
            summary=self.summary,
            published_at=article.published_at,
            description=None if self.ok else article.description,
            content=None if self.ok else article.content,
            error=self.error.value if self.error else None,
        )


@dataclass
class Digest:
    """Summarized headlines plus the total the news backend reported."""

    total_results: int
    results: list[SummarizationResult] = field(default_factory=list)


class DigestService:
    """
    Runs the article-to-summary pipeline.

    Each selected article is summarized in its own task. A task always
    resolves to a ``SummarizationResult``, so one failing article never
    fails or cancels the others.
    """

    def __init__(
        self,
        news: HeadlineSource,
        summarizer: Summarizer,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_input_chars: int = DEFAULT_MAX_INPUT_CHARS,
    ) -> None:
        self.news = news
        self.summarizer = summarizer
        self.batch_size = batch_size
        self.max_input_chars = max_input_chars

    async def build_digest(
        self,
        country: str | None = None,
        category: str | None = None,
    ) -> Digest:
        """Fetch headlines and summarize the first batch of them."""
        batch = await self.news.fetch_headlines(country=country, category=category)
        try:
            results = await self.summarize_batch(batch.articles)
        except NoEligibleContentError as e:
            e.total_results = batch.received
            raise
        return Digest(total_results=batch.total_results, results=results)

    async def summarize_batch(
        self,
        articles: Sequence[Article],
        limit: int | None = None,
    ) -> list[SummarizationResult]:
        """
        Summarize up to ``limit`` eligible articles concurrently.

        Returns one result per selected article, in input order.

        Raises:
            NoEligibleContentError: when no article has a title and body text
        """
        eligible = [a for a in articles if a.is_eligible]
        if not eligible:
            raise NoEligibleContentError(total_results=len(articles))

        selected = eligible[: limit or self.batch_size]
        tasks = [self._summarize_article(article) for article in selected]
        return list(await asyncio.gather(*tasks))

    async def summarize_text(self, text: str, language: str | None = None) -> str:
        """Summarize a single piece of text on demand."""
        return await self.summarizer.summarize(text[: self.max_input_chars], language)

    async def _summarize_article(self, article: Article) -> SummarizationResult:
        text = article.summary_input(self.max_input_chars)
        try:
            summary = await self.summarizer.summarize(text)
        except NewsbriefError as e:
            logger.warning("Failed to summarize article %r: %s", article.title, e.message)
            return SummarizationResult(article=article, summary=fallback_message(e), error=e.kind)
        except Exception as e:
            error = UpstreamError(ErrorKind.UPSTREAM_UNKNOWN, str(e) or type(e).__name__)
            logger.warning(
                "Unexpected failure summarizing article %r", article.title, exc_info=True
            )
            return SummarizationResult(
                article=article, summary=fallback_message(error), error=error.kind
            )
        return SummarizationResult(article=article, summary=summary)
