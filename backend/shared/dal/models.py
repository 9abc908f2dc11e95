"""Persistence models for the data access layer."""

from datetime import datetime

from pydantic import BaseModel, Field

from tenbou.logic.events import GameEvent
from tenbou.logic.state import GameLedger
from tenbou.logic.types import SettlementRow


class StoredGame(BaseModel, frozen=True):
    """Everything needed to continue, undo or report on one game."""

    game_id: str
    series_id: str | None = None  # games in the same series share statistics
    initial_ledger: GameLedger  # replay origin for undo
    ledger: GameLedger
    events: list[GameEvent] = Field(default_factory=list)
    settlement: list[SettlementRow] | None = None  # set once the game is finished
    created_at: datetime
    updated_at: datetime
