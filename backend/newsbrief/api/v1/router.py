"""API v1 main router - aggregates all endpoint routers."""

from fastapi import APIRouter

from newsbrief.api.v1 import articles, auth, summaries

api_router = APIRouter()

api_router.include_router(articles.router, prefix="/articles", tags=["articles"])
api_router.include_router(summaries.router, prefix="/summaries", tags=["summaries"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
