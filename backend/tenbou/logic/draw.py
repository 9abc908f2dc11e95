"""
Drawn-hand (ryukyoku) resolution: noten payments between ready and not-ready seats.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenbou.logic.exceptions import InvalidDrawError
from tenbou.logic.settings import NUM_PLAYERS
from tenbou.logic.state_utils import apply_score_changes, clear_riichi
from tenbou.logic.types import DrawResult

if TYPE_CHECKING:
    from tenbou.logic.state import GameLedger
    from tenbou.logic.types import DrawDeclaration

logger = structlog.get_logger()


def calculate_noten_payments(ready_seats: frozenset[int], pool: int) -> dict[int, int]:
    """
    Split the noten pool between ready and not-ready seats.

    Each ready seat receives pool // ready and each not-ready seat pays
    pool // not_ready; both divisions truncate independently. Nobody pays
    when all or none of the seats are ready.
    """
    changes: dict[int, int] = dict.fromkeys(range(NUM_PLAYERS), 0)
    ready_count = len(ready_seats)
    if ready_count in (0, NUM_PLAYERS):
        return changes

    receive = pool // ready_count
    pay = pool // (NUM_PLAYERS - ready_count)
    for seat in range(NUM_PLAYERS):
        changes[seat] = receive if seat in ready_seats else -pay
    return changes


def resolve_draw(
    ledger: GameLedger,
    declaration: DrawDeclaration,
) -> tuple[GameLedger, DrawResult]:
    """
    Apply a drawn hand to the ledger.

    Moves the noten payments and lowers every riichi flag. The stick pool
    carries over to the next hand. Whether the dealer was ready is reported
    on the result for the rotation rule.

    Returns (new_ledger, DrawResult).
    """
    ready_seats = declaration.ready_seats
    invalid = sorted(seat for seat in ready_seats if not (0 <= seat < NUM_PLAYERS))
    if invalid:
        raise InvalidDrawError(f"invalid ready seats {invalid}")

    score_changes = calculate_noten_payments(ready_seats, ledger.settings.noten_penalty_total)
    dealer_ready = ledger.dealer_seat in ready_seats

    new_ledger = apply_score_changes(ledger, score_changes)
    new_ledger = clear_riichi(new_ledger)

    logger.info(
        "draw resolved",
        reason=declaration.reason,
        ready_seats=sorted(ready_seats),
        dealer_ready=dealer_ready,
    )

    return new_ledger, DrawResult(
        reason=declaration.reason,
        ready_seats=sorted(ready_seats),
        not_ready_seats=[seat for seat in range(NUM_PLAYERS) if seat not in ready_seats],
        dealer_ready=dealer_ready,
        score_changes=score_changes,
    )
