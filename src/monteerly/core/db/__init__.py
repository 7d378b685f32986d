"""Database utilities - engine, session, migrations."""

from monteerly.core.db.engine import create_engine_for, dispose_engine, get_engine
from monteerly.core.db.migrations import run_migrations_sync
from monteerly.core.db.session import get_session

__all__ = [
    # Engine
    "create_engine_for",
    "dispose_engine",
    "get_engine",
    # Session
    "get_session",
    # Migrations
    "run_migrations_sync",
]
