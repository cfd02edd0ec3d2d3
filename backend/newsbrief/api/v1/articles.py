"""Articles API endpoints - headlines and their summaries."""

from fastapi import APIRouter, Depends, Query

from newsbrief.api.deps import get_digest_service, get_news_client
from newsbrief.schemas.article import (
    BatchSummaryRequest,
    BatchSummaryResponse,
    DigestResponse,
    HeadlinesResponse,
)
from newsbrief.services.digest_service import DigestService
from newsbrief.services.news_client import NewsApiClient

router = APIRouter()


@router.get("", response_model=DigestResponse)
async def get_digest(
    country: str | None = Query(default=None, min_length=2, max_length=2),
    category: str | None = Query(default=None, max_length=30),
    digest_service: DigestService = Depends(get_digest_service),
) -> DigestResponse:
    """
    Fetch top headlines and summarize the first few of them.

    Articles whose summary failed are still returned, with an explanation in
    their summary field and the error kind in `error`.
    """
    digest = await digest_service.build_digest(country=country, category=category)
    return DigestResponse(
        message="Articles fetched successfully",
        total_results=digest.total_results,
        articles=[result.to_response() for result in digest.results],
    )


@router.get("/headlines", response_model=HeadlinesResponse)
async def get_headlines(
    country: str | None = Query(default=None, min_length=2, max_length=2),
    category: str | None = Query(default=None, max_length=30),
    news: NewsApiClient = Depends(get_news_client),
) -> HeadlinesResponse:
    """Fetch top headlines without summarizing them."""
    batch = await news.fetch_headlines(country=country, category=category)
    return HeadlinesResponse(total_results=batch.total_results, articles=batch.articles)


@router.post("/summaries", response_model=BatchSummaryResponse)
async def summarize_articles(
    body: BatchSummaryRequest,
    digest_service: DigestService = Depends(get_digest_service),
) -> BatchSummaryResponse:
    """Summarize caller-supplied articles, one result per selected article."""
    articles = [article.to_article() for article in body.articles]
    results = await digest_service.summarize_batch(articles, limit=body.limit)
    return BatchSummaryResponse(articles=[result.to_response() for result in results])
