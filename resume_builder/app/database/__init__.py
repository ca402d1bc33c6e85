"""Database configuration and session management for the application.

Functions:
    get_engine: Returns the SQLAlchemy engine instance for the database.
    get_session_local: Returns the SQLAlchemy session factory.
    get_db: FastAPI dependency yielding a session per request.

Notes:
    1. The engine and session factory are created lazily on first access.
    2. No database connection is opened when this package is imported.

"""

from .database import get_db, get_engine, get_session_local

__all__ = ["get_db", "get_engine", "get_session_local"]
