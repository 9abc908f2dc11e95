"""In-process game repository for tests and single-device play."""

import asyncio

import structlog

from shared.dal.game_repository import GameRepository
from shared.dal.models import StoredGame
from tenbou.logic.statistics import SeriesStatistics

logger = structlog.get_logger()


class InMemoryGameRepository(GameRepository):
    """Dictionary-backed GameRepository. Contents are lost when the process exits."""

    def __init__(self) -> None:
        self._games: dict[str, StoredGame] = {}
        self._series: dict[str, SeriesStatistics] = {}
        self._lock = asyncio.Lock()

    async def create_game(self, game: StoredGame) -> bool:
        async with self._lock:
            if game.game_id in self._games:
                logger.warning("game already exists, ignoring duplicate create", game_id=game.game_id)
                return False
            self._games[game.game_id] = game
            return True

    async def get_game(self, game_id: str) -> StoredGame | None:
        return self._games.get(game_id)

    async def save_game(self, game: StoredGame) -> None:
        async with self._lock:
            if game.game_id not in self._games:
                raise KeyError(game.game_id)
            self._games[game.game_id] = game

    async def list_games(self, series_id: str | None = None, limit: int = 20) -> list[StoredGame]:
        games = [g for g in self._games.values() if series_id is None or g.series_id == series_id]
        games.sort(key=lambda g: g.created_at, reverse=True)
        return games[:limit]

    async def get_series(self, series_id: str) -> SeriesStatistics | None:
        return self._series.get(series_id)

    async def save_series(self, stats: SeriesStatistics) -> None:
        async with self._lock:
            self._series[stats.series_id] = stats
