"""SQLite-backed game repository."""

from __future__ import annotations

import asyncio
import sqlite3
from typing import TYPE_CHECKING

import structlog

from shared.dal.game_repository import GameRepository
from shared.dal.models import StoredGame
from tenbou.logic.statistics import SeriesStatistics

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()


class SqliteGameRepository(GameRepository):
    """SQLite implementation of GameRepository.

    Stores full game snapshots (ledger, initial ledger, event log, settlement)
    as JSON with indexed columns for series and recency queries.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_game(self, game: StoredGame) -> bool:
        """Insert a game record. Logs a warning and returns False on duplicate game_id."""
        async with self._lock:
            try:
                self._db.connection.execute(
                    "INSERT INTO games (id, series_id, status, created_at, updated_at, data) VALUES (?, ?, ?, ?, ?, ?)",
                    (
                        game.game_id,
                        game.series_id,
                        game.ledger.status.value,
                        game.created_at.isoformat(),
                        game.updated_at.isoformat(),
                        game.model_dump_json(),
                    ),
                )
                self._db.connection.commit()
            except sqlite3.IntegrityError:
                self._db.connection.rollback()
                logger.warning("game already exists, ignoring duplicate create", game_id=game.game_id)
                return False
            return True

    async def get_game(self, game_id: str) -> StoredGame | None:
        """Retrieve a single game by its id."""
        row = self._db.connection.execute(
            "SELECT data FROM games WHERE id = ?",
            (game_id,),
        ).fetchone()
        if row is None:
            return None
        return StoredGame.model_validate_json(row[0])

    async def save_game(self, game: StoredGame) -> None:
        """Overwrite an existing game's snapshot. Raises KeyError for unknown ids."""
        async with self._lock:
            cursor = self._db.connection.execute(
                "UPDATE games SET status = ?, updated_at = ?, data = ? WHERE id = ?",
                (
                    game.ledger.status.value,
                    game.updated_at.isoformat(),
                    game.model_dump_json(),
                    game.game_id,
                ),
            )
            self._db.connection.commit()
            if cursor.rowcount == 0:
                raise KeyError(game.game_id)

    async def list_games(self, series_id: str | None = None, limit: int = 20) -> list[StoredGame]:
        """Retrieve the most recent games, ordered by created_at descending."""
        if series_id is None:
            rows = self._db.connection.execute(
                "SELECT data FROM games ORDER BY created_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        else:
            rows = self._db.connection.execute(
                "SELECT data FROM games WHERE series_id = ? ORDER BY created_at DESC LIMIT ?",
                (series_id, limit),
            ).fetchall()
        return [StoredGame.model_validate_json(row[0]) for row in rows]

    async def get_series(self, series_id: str) -> SeriesStatistics | None:
        row = self._db.connection.execute(
            "SELECT data FROM series_statistics WHERE series_id = ?",
            (series_id,),
        ).fetchone()
        if row is None:
            return None
        return SeriesStatistics.model_validate_json(row[0])

    async def save_series(self, stats: SeriesStatistics) -> None:
        async with self._lock:
            self._db.connection.execute(
                "INSERT INTO series_statistics (series_id, data) VALUES (?, ?) "
                "ON CONFLICT(series_id) DO UPDATE SET data = excluded.data",
                (stats.series_id, stats.model_dump_json()),
            )
            self._db.connection.commit()
