"""
Riichi declaration: the seat deposits one stick into the pool.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenbou.logic.exceptions import InvalidRiichiError
from tenbou.logic.settings import NUM_PLAYERS
from tenbou.logic.state_utils import update_seat
from tenbou.logic.types import RiichiResult

if TYPE_CHECKING:
    from tenbou.logic.state import GameLedger

logger = structlog.get_logger()


def declare_riichi(ledger: GameLedger, seat: int) -> tuple[GameLedger, RiichiResult]:
    """
    Execute riichi declaration for a seat.

    Sets the riichi flag, deducts the deposit and adds one stick to the pool.

    Returns (new_ledger, RiichiResult).
    """
    if not (0 <= seat < NUM_PLAYERS):
        raise InvalidRiichiError(f"invalid seat {seat}")

    settings = ledger.settings
    player = ledger.seats[seat]
    if player.is_riichi:
        raise InvalidRiichiError(f"seat {seat} has already declared riichi")
    if player.points < settings.riichi_cost:
        raise InvalidRiichiError(
            f"seat {seat} needs {settings.riichi_cost} points to declare riichi, has {player.points}"
        )

    new_ledger = update_seat(
        ledger,
        seat,
        is_riichi=True,
        riichi_round=ledger.round,
        points=player.points - settings.riichi_cost,
    )
    new_ledger = new_ledger.model_copy(update={"stick_pool": ledger.stick_pool + 1})

    logger.info("riichi declared", seat=seat, stick_pool=new_ledger.stick_pool)

    return new_ledger, RiichiResult(
        seat=seat,
        points=new_ledger.seats[seat].points,
        stick_pool=new_ledger.stick_pool,
    )
