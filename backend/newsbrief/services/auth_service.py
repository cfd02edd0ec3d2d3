"""Account service - registration, login and stateless session tokens."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from newsbrief.config import Settings
from newsbrief.models import Account

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for account and session failures."""


class EmailAlreadyRegisteredError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class InvalidTokenError(AuthError):
    pass


BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Salted bcrypt hash of a password."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))


def issue_token(account: Account, settings: Settings, now: datetime | None = None) -> str:
    """Signed session token carrying the account identity, valid for the configured TTL."""
    issued_at = now or datetime.now(UTC)
    claims = {
        "sub": str(account.id),
        "email": account.email,
        "username": account.username,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=settings.token_ttl_seconds),
    }
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    """
    Verify a session token's signature and expiry.

    Raises:
        InvalidTokenError: if the token is expired, tampered with or malformed
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError("Invalid token") from e
    return claims


class AccountService:
    """Service for creating and authenticating accounts."""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings

    async def get_by_email(self, email: str) -> Account | None:
        result = await self.session.execute(
            select(Account).where(Account.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get(self, account_id: UUID) -> Account | None:
        return await self.session.get(Account, account_id)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        country: str | None = None,
    ) -> Account:
        """Create a new account. Emails are unique, case-insensitively."""
        email = email.strip().lower()
        if await self.get_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        account = Account(
            username=username,
            email=email,
            password_hash=hash_password(password),
            country=country.lower() if country else None,
        )
        self.session.add(account)
        try:
            await self.session.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            await self.session.rollback()
            raise EmailAlreadyRegisteredError(email) from e
        await self.session.refresh(account)
        logger.info("Registered account %s", account.id)
        return account

    async def authenticate(self, email: str, password: str) -> Account:
        """Return the account for valid credentials."""
        account = await self.get_by_email(email)
        if account is None or not verify_password(password, account.password_hash):
            raise InvalidCredentialsError("Invalid email or password")
        return account

    async def login(self, email: str, password: str) -> tuple[Account, str]:
        """Authenticate and issue a session token."""
        account = await self.authenticate(email, password)
        return account, issue_token(account, self.settings)
