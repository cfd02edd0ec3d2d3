"""Account model for the relational store."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class Account(SQLModel, table=True):
    """User account. Created on registration, read on login."""

    __tablename__ = "accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    username: str = Field(max_length=100)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=255)
    country: str | None = Field(default=None, max_length=2)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
