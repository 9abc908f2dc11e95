"""
Series statistics: running totals of settlements across the games of a series.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field

from tenbou.logic.enums import GameStatus
from tenbou.logic.exceptions import GameNotPlayableError

if TYPE_CHECKING:
    from tenbou.logic.state import GameLedger, Seat
    from tenbou.logic.types import SettlementRow

logger = structlog.get_logger()


class PlayerSeriesStats(BaseModel):
    """Totals for one player over a series."""

    model_config = ConfigDict(frozen=True)

    player_key: str
    name: str
    total_games: int = 0
    total_settlement: int = 0
    rank_counts: tuple[int, int, int, int] = (0, 0, 0, 0)  # 1st..4th

    @property
    def average_rank(self) -> float | None:
        if not self.total_games:
            return None
        return sum((rank + 1) * count for rank, count in enumerate(self.rank_counts)) / self.total_games


class SeriesStatistics(BaseModel):
    """Aggregated results of every finished game recorded into a series."""

    model_config = ConfigDict(frozen=True)

    series_id: str
    players: dict[str, PlayerSeriesStats] = Field(default_factory=dict)
    game_ids: tuple[str, ...] = ()

    @property
    def total_games(self) -> int:
        return len(self.game_ids)


def player_key(seat: Seat) -> str:
    """Players are tracked by id when they have one, otherwise by seat name."""
    return seat.player_id or seat.name


def record_game(
    stats: SeriesStatistics,
    ledger: GameLedger,
    standings: list[SettlementRow],
) -> SeriesStatistics:
    """
    Add one finished game's settlement to the series totals.

    Recording the same game twice leaves the statistics unchanged.
    """
    if ledger.status != GameStatus.FINISHED:
        raise GameNotPlayableError(f"game {ledger.game_id} is {ledger.status}; only finished games are recorded")

    if ledger.game_id in stats.game_ids:
        logger.info("series statistics already include game", series_id=stats.series_id)
        return stats

    players = dict(stats.players)
    for row in standings:
        seat = ledger.seats[row.seat]
        key = player_key(seat)
        current = players.get(key) or PlayerSeriesStats(player_key=key, name=seat.name)
        rank_counts = list(current.rank_counts)
        rank_counts[row.rank - 1] += 1
        players[key] = current.model_copy(
            update={
                "name": seat.name,
                "total_games": current.total_games + 1,
                "total_settlement": current.total_settlement + row.settlement,
                "rank_counts": tuple(rank_counts),
            },
        )

    logger.info("series statistics updated", series_id=stats.series_id, total_games=stats.total_games + 1)
    return stats.model_copy(update={"players": players, "game_ids": (*stats.game_ids, ledger.game_id)})
