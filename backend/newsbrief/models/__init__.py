"""Models package - SQLModel database models."""

from newsbrief.models.account import Account

__all__ = ["Account"]
