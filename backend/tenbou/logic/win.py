"""
Win resolution: validate a win declaration and move the points.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenbou.logic.enums import EventType
from tenbou.logic.exceptions import InvalidWinError, InvariantViolationError
from tenbou.logic.score_table import validate_han_fu
from tenbou.logic.scoring import ScoreRequest, calculate_score
from tenbou.logic.settings import NUM_PLAYERS
from tenbou.logic.state_utils import apply_score_changes, clear_riichi
from tenbou.logic.types import WinResult

if TYPE_CHECKING:
    from tenbou.logic.score_table import ScorePatternTable
    from tenbou.logic.state import GameLedger
    from tenbou.logic.types import WinDeclaration

logger = structlog.get_logger()


def validate_win_declaration(declaration: WinDeclaration) -> None:
    """
    Reject a malformed win before anything is computed.

    - han/fu must form a valid combination
    - seats must be 0-3
    - self-draw must not name a loser, a discard win must, and never the winner
    """
    if not validate_han_fu(declaration.han, declaration.fu):
        raise InvalidWinError(f"invalid han/fu combination: {declaration.han} han {declaration.fu} fu")
    if not (0 <= declaration.winner_seat < NUM_PLAYERS):
        raise InvalidWinError(f"invalid winner seat {declaration.winner_seat}")
    if declaration.is_self_draw:
        if declaration.loser_seat is not None:
            raise InvalidWinError("self-draw win cannot name a loser seat")
        return
    if declaration.loser_seat is None:
        raise InvalidWinError("discard win requires a loser seat")
    if not (0 <= declaration.loser_seat < NUM_PLAYERS):
        raise InvalidWinError(f"invalid loser seat {declaration.loser_seat}")
    if declaration.loser_seat == declaration.winner_seat:
        raise InvalidWinError("winner and loser must be different seats")


def resolve_win(
    ledger: GameLedger,
    declaration: WinDeclaration,
    table: ScorePatternTable,
) -> tuple[GameLedger, WinResult]:
    """
    Apply a win to the ledger.

    Credits the winner with the total score, debits every paying seat,
    lowers all riichi flags and empties the stick pool (it was paid out as
    part of the total). Dealer rotation is left to the caller.

    Returns (new_ledger, WinResult).
    """
    validate_win_declaration(declaration)

    winner_seat = declaration.winner_seat
    score = calculate_score(
        ScoreRequest(
            han=declaration.han,
            fu=declaration.fu,
            is_dealer_winner=ledger.is_dealer(winner_seat),
            is_self_draw=declaration.is_self_draw,
            honba=ledger.honba,
            stick_pool=ledger.stick_pool,
        ),
        table,
        ledger.settings,
    )

    score_changes: dict[int, int] = dict.fromkeys(range(NUM_PLAYERS), 0)
    for seat, amount in score.payments_by_seat(winner_seat, ledger.dealer_seat, declaration.loser_seat).items():
        score_changes[seat] -= amount
    score_changes[winner_seat] += score.total_score

    # the only points not coming from a seat are the pooled riichi deposits
    if sum(score_changes.values()) != score.stick_payment:
        raise InvariantViolationError(
            f"win distribution is not zero-sum: changes={score_changes} stick_payment={score.stick_payment}"
        )

    riichi_sticks_collected = ledger.stick_pool
    new_ledger = apply_score_changes(ledger, score_changes)
    new_ledger = clear_riichi(new_ledger)
    new_ledger = new_ledger.model_copy(update={"stick_pool": 0})

    logger.info(
        "win resolved",
        winner_seat=winner_seat,
        loser_seat=declaration.loser_seat,
        han=declaration.han,
        fu=declaration.fu,
        is_self_draw=declaration.is_self_draw,
        total_score=score.total_score,
        score_changes=score_changes,
    )

    return new_ledger, WinResult(
        type=EventType.TSUMO if declaration.is_self_draw else EventType.RON,
        winner_seat=winner_seat,
        loser_seat=declaration.loser_seat,
        score=score,
        score_changes=score_changes,
        riichi_sticks_collected=riichi_sticks_collected,
    )
