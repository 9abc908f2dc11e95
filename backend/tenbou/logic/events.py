"""
Per-game event log and undo by replay.

Every applied declaration appends one event stamped with the round and honba
it was played in. Undo never edits history: it appends an UNDO event naming
the reverted sequence number, and the ledger is rebuilt by replaying the
remaining events from the initial ledger.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from tenbou.logic.enums import UNDOABLE_EVENTS, EventType
from tenbou.logic.exceptions import NothingToUndoError
from tenbou.logic.game import process_draw, process_riichi, process_win
from tenbou.logic.types import DrawDeclaration, RiichiDeclaration, WinDeclaration

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tenbou.logic.score_table import ScorePatternTable
    from tenbou.logic.state import GameLedger

logger = structlog.get_logger()


class GameEvent(BaseModel):
    """One entry of the event log."""

    model_config = ConfigDict(frozen=True)

    sequence: int = Field(ge=1)
    type: EventType
    round: int  # round the event was played in
    honba: int
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


def append_event(
    events: Sequence[GameEvent],
    event_type: EventType,
    ledger: GameLedger,
    payload: dict[str, Any] | None = None,
) -> list[GameEvent]:
    """Return a new log with an event stamped from the pre-declaration ledger."""
    event = GameEvent(
        sequence=len(events) + 1,
        type=event_type,
        round=ledger.round,
        honba=ledger.honba,
        payload=payload or {},
    )
    return [*events, event]


def undone_sequences(events: Sequence[GameEvent]) -> set[int]:
    return {event.payload["undone_sequence"] for event in events if event.type == EventType.UNDO}


def active_events(events: Sequence[GameEvent]) -> list[GameEvent]:
    """Undoable events that have not been undone, in log order."""
    undone = undone_sequences(events)
    return [event for event in events if event.type in UNDOABLE_EVENTS and event.sequence not in undone]


def last_undoable_event(events: Sequence[GameEvent]) -> GameEvent:
    """Raise NothingToUndoError when every undoable event is already reverted."""
    remaining = active_events(events)
    if not remaining:
        raise NothingToUndoError("no win, draw or riichi left to undo")
    return remaining[-1]


def apply_event(ledger: GameLedger, event: GameEvent, table: ScorePatternTable) -> GameLedger:
    """Re-apply one recorded declaration to a ledger."""
    if event.type in (EventType.TSUMO, EventType.RON):
        new_ledger, _result, _end = process_win(ledger, WinDeclaration.model_validate(event.payload), table)
        return new_ledger
    if event.type == EventType.DRAW:
        new_ledger, _result, _end = process_draw(ledger, DrawDeclaration.model_validate(event.payload))
        return new_ledger
    if event.type == EventType.RIICHI:
        new_ledger, _result = process_riichi(ledger, RiichiDeclaration.model_validate(event.payload))
        return new_ledger
    raise AssertionError(f"event type {event.type} cannot be replayed")  # pragma: no cover


def replay_events(
    initial_ledger: GameLedger,
    events: Sequence[GameEvent],
    table: ScorePatternTable,
) -> GameLedger:
    """Rebuild a ledger from its initial snapshot and the still-active events."""
    ledger = initial_ledger
    for event in active_events(events):
        ledger = apply_event(ledger, event, table)
    return ledger


def undo_last_event(
    initial_ledger: GameLedger,
    events: Sequence[GameEvent],
    table: ScorePatternTable,
) -> tuple[GameLedger, list[GameEvent], GameEvent]:
    """
    Revert the most recent win, draw or riichi.

    Returns (rebuilt_ledger, new_events, undone_event). The UNDO event is
    stamped with the round and honba of the rebuilt ledger.
    """
    target = last_undoable_event(events)
    ledger = replay_events(initial_ledger, [event for event in events if event is not target], table)

    new_events = append_event(events, EventType.UNDO, ledger, {"undone_sequence": target.sequence})

    logger.info(
        "event undone",
        undone_sequence=target.sequence,
        undone_type=target.type,
        round=ledger.round,
        honba=ledger.honba,
    )
    return ledger, new_events, target
