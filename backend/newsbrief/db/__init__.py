"""Database connections package."""

from newsbrief.db.postgres import create_engine, create_session_factory, get_session, init_db

__all__ = ["create_engine", "create_session_factory", "get_session", "init_db"]
