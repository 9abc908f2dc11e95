"""
Ledger state models.

All models are frozen; updates go through ``model_copy`` (see state_utils).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from tenbou.logic.enums import EndReason, GameFormat, GameMode, GameStatus
from tenbou.logic.settings import NUM_PLAYERS, GameSettings


class Seat(BaseModel):
    """
    One of the four seats at the table.
    """

    model_config = ConfigDict(frozen=True)

    position: int = Field(ge=0, le=NUM_PLAYERS - 1)
    name: str
    player_id: str | None = None  # multiplayer identity; None for solo seats
    points: int = 25000

    # riichi state
    is_riichi: bool = False
    riichi_round: int | None = None  # round in which riichi was declared


class GameLedger(BaseModel):
    """
    Point ledger for one game: seat totals plus the round counters.
    """

    model_config = ConfigDict(frozen=True)

    game_id: str
    mode: GameMode = GameMode.SOLO
    status: GameStatus = GameStatus.WAITING
    seats: tuple[Seat, Seat, Seat, Seat]

    # game progression
    round: int = Field(default=1, ge=1)  # 1-based hand counter, advances only on dealer rotation
    dealer_seat: int = Field(default=0, ge=0, le=NUM_PLAYERS - 1)
    starting_dealer_seat: int = Field(default=0, ge=0, le=NUM_PLAYERS - 1)

    # sticks
    honba: int = Field(default=0, ge=0)  # continuation counter
    stick_pool: int = Field(default=0, ge=0)  # riichi deposits waiting for a winner

    end_reason: EndReason | None = None
    settings: GameSettings = Field(default_factory=GameSettings)

    @model_validator(mode="after")
    def _check_seat_positions(self) -> GameLedger:
        positions = [seat.position for seat in self.seats]
        if positions != list(range(NUM_PLAYERS)):
            raise ValueError(f"seats must be ordered by position 0-{NUM_PLAYERS - 1}, got {positions}")
        return self

    @property
    def format(self) -> GameFormat:
        return self.settings.game_format

    @property
    def points(self) -> tuple[int, ...]:
        return tuple(seat.points for seat in self.seats)

    def is_dealer(self, seat: int) -> bool:
        return seat == self.dealer_seat


def ledger_total(ledger: GameLedger) -> int:
    """Points on the table including riichi deposits held in the pool."""
    return sum(ledger.points) + ledger.stick_pool * ledger.settings.riichi_stick_value


def expected_total(settings: GameSettings) -> int:
    return settings.initial_points * NUM_PLAYERS
