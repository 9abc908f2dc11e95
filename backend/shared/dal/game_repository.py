"""Abstract interface for game ledger persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import StoredGame
    from tenbou.logic.statistics import SeriesStatistics


class GameRepository(ABC):
    """Abstract interface for game ledger persistence."""

    @abstractmethod
    async def create_game(self, game: StoredGame) -> bool:
        """Insert a new game. Returns False when the id is already taken."""

    @abstractmethod
    async def get_game(self, game_id: str) -> StoredGame | None: ...

    @abstractmethod
    async def save_game(self, game: StoredGame) -> None:
        """Replace the stored snapshot of an existing game."""

    @abstractmethod
    async def list_games(self, series_id: str | None = None, limit: int = 20) -> list[StoredGame]:
        """Most recently created games first, optionally limited to one series."""

    @abstractmethod
    async def get_series(self, series_id: str) -> SeriesStatistics | None: ...

    @abstractmethod
    async def save_series(self, stats: SeriesStatistics) -> None: ...
