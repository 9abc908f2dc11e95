"""
Final settlement: ranks, difference from the return score, uma.

All arithmetic is integer. First place absorbs the rounding of the other three
seats so the settlement column always sums to zero.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenbou.logic.exceptions import InvariantViolationError
from tenbou.logic.types import SettlementRow

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tenbou.logic.state import GameLedger

logger = structlog.get_logger()

POINTS_PER_UNIT = 1000


def _truncate_thousands(diff: int) -> int:
    """
    Convert a point difference to settlement units, rounding toward zero.

    Positive differences are floored, negative ones ceiled:
    5900 -> 5, -5900 -> -5.
    """
    if diff >= 0:
        return diff // POINTS_PER_UNIT
    return -(-diff // POINTS_PER_UNIT)


def rank_seats(points: Sequence[int]) -> list[int]:
    """Return seat positions ordered 1st to 4th: higher points first, lower seat on ties."""
    return sorted(range(len(points)), key=lambda seat: (-points[seat], seat))


def calculate_settlement(
    points: Sequence[int],
    base_points: int,
    uma: Sequence[int],
) -> list[SettlementRow]:
    """
    Calculate the settlement rows for a finished game.

    Input: final points indexed by seat, the return score and the uma per rank.
    Output: one row per seat in rank order.

    Steps:
    1. Rank seats by points, ties to the lower seat
    2. Subtract base_points and round toward zero to 1000-point units
    3. Ranks 2-4 get their rounded difference plus uma
    4. Rank 1 gets minus the sum of the others' rounded differences plus uma

    Raises InvariantViolationError if the settlement column does not sum to zero.
    """
    order = rank_seats(points)

    rows: list[SettlementRow] = []
    for index, seat in enumerate(order):
        raw_diff = points[seat] - base_points
        rounded_diff = _truncate_thousands(raw_diff)
        rows.append(
            SettlementRow(
                seat=seat,
                final_points=points[seat],
                rank=index + 1,
                raw_diff=raw_diff,
                rounded_diff=rounded_diff,
                uma=uma[index],
                settlement=rounded_diff + uma[index],
            )
        )

    # first place takes whatever the others' rounding left behind
    first_rounded = -sum(row.rounded_diff for row in rows[1:])
    rows[0] = rows[0].model_copy(
        update={"rounded_diff": first_rounded, "settlement": first_rounded + rows[0].uma},
    )

    total = sum(row.settlement for row in rows)
    if total != 0:
        logger.error("settlement is not zero-sum", total=total, points=list(points), uma=list(uma))
        raise InvariantViolationError(f"settlement sums to {total}, expected 0 (uma={list(uma)})")

    return rows


def settle_ledger(ledger: GameLedger) -> list[SettlementRow]:
    """Settle a ledger snapshot with its own base points and uma."""
    settings = ledger.settings
    return calculate_settlement(ledger.points, settings.base_points, settings.uma)
