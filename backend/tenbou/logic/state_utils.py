"""
Immutable ledger update utilities using Pydantic model_copy.

These helpers never mutate their input; they always return new ledger
objects with the requested changes applied.
"""

from tenbou.logic.enums import GameMode
from tenbou.logic.exceptions import InvalidSeatError, InvariantViolationError
from tenbou.logic.settings import NUM_PLAYERS
from tenbou.logic.state import GameLedger, Seat, expected_total, ledger_total

_SEAT_FIELDS = set(Seat.model_fields)

SeatRef = int | str


def update_seat(
    ledger: GameLedger,
    seat: int,
    **updates: object,
) -> GameLedger:
    """
    Return new ledger with updated seat.

    Raises:
        InvalidSeatError: If seat is out of bounds
        ValueError: If update fields are invalid

    """
    if not (0 <= seat < NUM_PLAYERS):
        raise InvalidSeatError(f"Invalid seat {seat}, expected 0-{NUM_PLAYERS - 1}")
    invalid_fields = set(updates) - _SEAT_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid seat fields: {invalid_fields}")
    seats = list(ledger.seats)
    seats[seat] = ledger.seats[seat].model_copy(update=updates)
    return ledger.model_copy(update={"seats": tuple(seats)})


def apply_score_changes(ledger: GameLedger, score_changes: dict[int, int]) -> GameLedger:
    """Return new ledger with each seat's points shifted by its change."""
    seats = tuple(
        seat.model_copy(update={"points": seat.points + score_changes.get(seat.position, 0)}) for seat in ledger.seats
    )
    return ledger.model_copy(update={"seats": seats})


def clear_riichi(ledger: GameLedger) -> GameLedger:
    """Return new ledger with every riichi flag lowered."""
    seats = tuple(seat.model_copy(update={"is_riichi": False, "riichi_round": None}) for seat in ledger.seats)
    return ledger.model_copy(update={"seats": seats})


def resolve_seat(ledger: GameLedger, ref: SeatRef) -> int:
    """
    Resolve a caller's seat reference to a position.

    Solo games address seats by position; multiplayer games by player id.
    A position is accepted in both modes.
    """
    if isinstance(ref, bool):
        raise InvalidSeatError(f"Invalid seat reference {ref!r}")
    if isinstance(ref, int):
        if not (0 <= ref < NUM_PLAYERS):
            raise InvalidSeatError(f"Invalid seat {ref}, expected 0-{NUM_PLAYERS - 1}")
        return ref
    if ledger.mode == GameMode.SOLO:
        raise InvalidSeatError(f"Solo games address seats by position, got {ref!r}")
    for seat in ledger.seats:
        if seat.player_id == ref:
            return seat.position
    raise InvalidSeatError(f"Player {ref!r} is not seated in game {ledger.game_id}")


def check_ledger_total(ledger: GameLedger) -> None:
    """Raise InvariantViolationError when points were created or destroyed."""
    total = ledger_total(ledger)
    expected = expected_total(ledger.settings)
    if total != expected:
        raise InvariantViolationError(
            f"ledger total {total} != {expected} for game {ledger.game_id} "
            f"(points={list(ledger.points)} stick_pool={ledger.stick_pool})"
        )
