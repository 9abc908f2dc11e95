from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from shared.dal.memory import InMemoryGameRepository
from tenbou.logic.enums import GameMode, GameStatus
from tenbou.logic.score_table import ScorePattern, ScorePatternTable, build_standard_table
from tenbou.logic.settings import GameSettings
from tenbou.logic.state import GameLedger, Seat
from tenbou.service.score_keeper import ScoreKeeper

if TYPE_CHECKING:
    from collections.abc import Sequence

SEAT_NAMES = ("East", "South", "West", "North")


# ============================================================================
# Ledger Builder Helpers
# ============================================================================


def create_seat(
    position: int = 0,
    name: str | None = None,
    *,
    player_id: str | None = None,
    points: int = 25000,
    is_riichi: bool = False,
    riichi_round: int | None = None,
) -> Seat:
    """Create a Seat with sensible defaults for testing."""
    return Seat(
        position=position,
        name=name if name is not None else SEAT_NAMES[position],
        player_id=player_id,
        points=points,
        is_riichi=is_riichi,
        riichi_round=riichi_round,
    )


def create_ledger(  # noqa: PLR0913
    *,
    points: Sequence[int] = (25000, 25000, 25000, 25000),
    seats: Sequence[Seat] | None = None,
    dealer_seat: int = 0,
    round_number: int = 1,
    honba: int = 0,
    stick_pool: int = 0,
    status: GameStatus = GameStatus.PLAYING,
    mode: GameMode = GameMode.SOLO,
    settings: GameSettings | None = None,
    game_id: str = "test-game",
) -> GameLedger:
    """
    Create a GameLedger with sensible defaults for testing.

    Points are taken as given; callers keep sum(points) + stick_pool * 1000
    at 100000 when the ledger goes through a full declaration.
    """
    if seats is None:
        seats = [create_seat(i, points=p) for i, p in enumerate(points)]
    return GameLedger(
        game_id=game_id,
        mode=mode,
        status=status,
        seats=tuple(seats),
        round=round_number,
        dealer_seat=dealer_seat,
        starting_dealer_seat=0,
        honba=honba,
        stick_pool=stick_pool,
        settings=settings or GameSettings(),
    )


# 3 han 30 fu carrying mangan-sized payments, used for the worked payment examples
FLAT_3_30 = ScorePattern(
    han=3,
    fu=30,
    dealer_points=12000,
    non_dealer_points=8000,
    dealer_self_draw_each=4000,
    non_dealer_self_draw_from_dealer=4000,
    non_dealer_self_draw_from_non_dealer=2000,
)


@pytest.fixture
def table() -> ScorePatternTable:
    return build_standard_table()


@pytest.fixture
def flat_table(table: ScorePatternTable) -> ScorePatternTable:
    return table.with_pattern(FLAT_3_30)


@pytest.fixture
def repository() -> InMemoryGameRepository:
    return InMemoryGameRepository()


@pytest.fixture
def keeper(repository: InMemoryGameRepository, table: ScorePatternTable) -> ScoreKeeper:
    return ScoreKeeper(repository, table=table)
