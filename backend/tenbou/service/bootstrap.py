"""Build a ScoreKeeper backed by the configured SQLite database."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog

from shared.db import Database, SqliteGameRepository
from shared.logging import setup_logging
from tenbou.service.score_keeper import ScoreKeeper
from tenbou.service.settings import EngineServerSettings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = structlog.get_logger()


@asynccontextmanager
async def open_score_keeper(
    settings: EngineServerSettings | None = None,
    *,
    configure_logging: bool = True,
) -> AsyncIterator[ScoreKeeper]:
    """
    Open the database named in settings and yield a ScoreKeeper over it.

    The connection is closed on exit.
    """
    if settings is None:
        settings = EngineServerSettings()
    if configure_logging:
        setup_logging(log_dir=settings.log_dir)

    db = Database(settings.database_path)
    db.connect()
    try:
        logger.info("score keeper ready", database_path=settings.database_path)
        yield ScoreKeeper(SqliteGameRepository(db), settings=settings)
    finally:
        db.close()
        logger.info("score keeper closed")
