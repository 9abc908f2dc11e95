"""
Pydantic models for declarations and results that cross component boundaries.

Declarations are what a caller submits for one hand; results are what the
resolvers hand back. Both are plain data and serialize to JSON for the event
log and the notification layer.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from tenbou.logic.enums import DrawReason, EndReason, EventType
from tenbou.logic.scoring import ScoreResult


class SeatConfig(BaseModel):
    """Configuration for a single seat in a new game."""

    name: str = Field(min_length=1, max_length=20)
    player_id: str | None = None


class WinDeclaration(BaseModel):
    """A declared win (tsumo or ron) with its already-determined han and fu."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["win"] = "win"
    winner_seat: int
    loser_seat: int | None = None
    han: int
    fu: int
    is_self_draw: bool


class DrawDeclaration(BaseModel):
    """A drawn hand and the seats that were ready (tenpai) at the end."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["draw"] = "draw"
    ready_seats: frozenset[int] = frozenset()
    reason: DrawReason = DrawReason.EXHAUSTIVE


class RiichiDeclaration(BaseModel):
    """A riichi deposit by one seat."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["riichi"] = "riichi"
    seat: int


class WinResult(BaseModel):
    """Point movement of a resolved win."""

    type: Literal[EventType.TSUMO, EventType.RON]
    winner_seat: int
    loser_seat: int | None = None
    score: ScoreResult
    score_changes: dict[int, int]
    riichi_sticks_collected: int


class DrawResult(BaseModel):
    """Point movement of a resolved draw."""

    type: Literal[EventType.DRAW] = EventType.DRAW
    reason: DrawReason
    ready_seats: list[int]
    not_ready_seats: list[int]
    dealer_ready: bool
    score_changes: dict[int, int]


class RiichiResult(BaseModel):
    """Riichi deposit accepted."""

    type: Literal[EventType.RIICHI] = EventType.RIICHI
    seat: int
    points: int  # seat's points after the deposit
    stick_pool: int


class SettlementRow(BaseModel):
    """Final result for one seat."""

    model_config = ConfigDict(frozen=True)

    seat: int
    final_points: int
    rank: int = Field(ge=1, le=4)
    raw_diff: int
    rounded_diff: int
    uma: int
    settlement: int


class GameEndResult(BaseModel):
    """Result of game finalization."""

    type: Literal[EventType.GAME_END] = EventType.GAME_END
    reason: EndReason
    detail: str | None = None
    winner_seat: int
    standings: list[SettlementRow]


RoundResult = WinResult | DrawResult
