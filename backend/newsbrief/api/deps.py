"""Shared FastAPI dependencies."""

from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from newsbrief.config import Settings
from newsbrief.db.postgres import get_session
from newsbrief.models import Account
from newsbrief.services.auth_service import AccountService, InvalidTokenError, decode_token
from newsbrief.services.digest_service import DigestService
from newsbrief.services.news_client import NewsApiClient
from newsbrief.services.summarizer import GeminiSummarizer

bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_news_client(request: Request) -> NewsApiClient:
    return request.app.state.news_client


def get_summarizer(request: Request) -> GeminiSummarizer:
    return request.app.state.summarizer


def get_digest_service(
    news: NewsApiClient = Depends(get_news_client),
    summarizer: GeminiSummarizer = Depends(get_summarizer),
    settings: Settings = Depends(get_app_settings),
) -> DigestService:
    return DigestService(
        news,
        summarizer,
        batch_size=settings.batch_size,
        max_input_chars=settings.max_input_chars,
    )


def get_account_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> AccountService:
    return AccountService(session, settings)


async def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> Account:
    """Resolve the bearer token to an account, or answer 401."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        claims = decode_token(credentials.credentials, settings)
    except InvalidTokenError as e:
        unauthorized.detail = str(e)
        raise unauthorized from e

    try:
        account = await accounts.get(UUID(claims["sub"]))
    except ValueError:
        account = None
    if account is None:
        raise unauthorized
    return account
