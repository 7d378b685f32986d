"""Alembic migration runner."""

from pathlib import Path

from alembic import command
from alembic.config import Config

from monteerly.core.logging import get_logger

logger = get_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[4]


def _alembic_config() -> Config:
    config = Config(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    return config


def run_migrations_sync() -> None:
    """Upgrade the database to the latest revision.

    Blocking; call through asyncio.to_thread from async code.
    """
    logger.info("Running database migrations")
    command.upgrade(_alembic_config(), "head")
    logger.info("Database migrations complete")
