"""
Score calculation for a declared win.

Turns an already-determined (han, fu) into the total the winner collects and
the amount each losing seat pays, including honba and riichi-stick surcharges.
Pure functions over the score table; nothing here touches a ledger.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from tenbou.logic.settings import NUM_PLAYERS, GameSettings

if TYPE_CHECKING:
    from tenbou.logic.score_table import ScorePatternTable


class ScoreRequest(BaseModel):
    """Inputs needed to price a win."""

    model_config = ConfigDict(frozen=True)

    han: int = Field(ge=1, le=13)
    fu: int = Field(ge=20, le=110)
    is_dealer_winner: bool
    is_self_draw: bool
    honba: int = Field(default=0, ge=0)
    stick_pool: int = Field(default=0, ge=0)


class ScoreResult(BaseModel):
    """
    Priced win.

    Per-role payments already include the honba surcharge. For a self-draw,
    ``from_dealer`` is what the dealer pays and ``from_non_dealer`` what each
    other loser pays; a dealer self-draw has every loser paying
    ``from_non_dealer``. For a discard win only ``from_discarder`` is set.
    """

    model_config = ConfigDict(frozen=True)

    han: int
    fu: int
    base_points: int  # table value before surcharges
    total_score: int
    is_dealer_winner: bool
    is_self_draw: bool
    from_dealer: int | None = None
    from_non_dealer: int | None = None
    from_discarder: int | None = None
    honba_payment: int
    stick_payment: int

    def payments_by_seat(
        self,
        winner_seat: int,
        dealer_seat: int,
        loser_seat: int | None = None,
    ) -> dict[int, int]:
        """Map each paying seat to the amount it owes."""
        if not self.is_self_draw:
            if loser_seat is None:
                raise ValueError("discard win needs the discarding seat")
            return {loser_seat: self.from_discarder or 0}

        payments: dict[int, int] = {}
        for seat in range(NUM_PLAYERS):
            if seat == winner_seat:
                continue
            if seat == dealer_seat and not self.is_dealer_winner:
                payments[seat] = self.from_dealer or 0
            else:
                payments[seat] = self.from_non_dealer or 0
        return payments


def calculate_score(
    request: ScoreRequest,
    table: ScorePatternTable,
    settings: GameSettings | None = None,
) -> ScoreResult:
    """
    Price a win.

    Payment structure:
    - Dealer self-draw: each non-dealer pays dealer_self_draw_each + honba bonus
    - Non-dealer self-draw: dealer pays the dealer share, the two other
      non-dealers pay the non-dealer share, each plus honba bonus
    - Discard win: discarder pays the full table value + honba * 300
    - The winner also collects the whole riichi-stick pool

    Raises PatternNotFoundError when the table has no row for the hand.
    """
    rules = settings or GameSettings()
    pattern = table.lookup(request.han, request.fu)

    honba_payment = request.honba * rules.honba_ron_bonus
    honba_per_loser = request.honba * rules.honba_tsumo_bonus_per_loser
    stick_payment = request.stick_pool * rules.riichi_stick_value

    if request.is_self_draw:
        if request.is_dealer_winner:
            each = pattern.dealer_self_draw_each + honba_per_loser
            return ScoreResult(
                han=request.han,
                fu=request.fu,
                base_points=pattern.dealer_points,
                total_score=each * (NUM_PLAYERS - 1) + stick_payment,
                is_dealer_winner=True,
                is_self_draw=True,
                from_non_dealer=each,
                honba_payment=honba_per_loser * (NUM_PLAYERS - 1),
                stick_payment=stick_payment,
            )
        from_dealer = pattern.non_dealer_self_draw_from_dealer + honba_per_loser
        from_non_dealer = pattern.non_dealer_self_draw_from_non_dealer + honba_per_loser
        return ScoreResult(
            han=request.han,
            fu=request.fu,
            base_points=pattern.non_dealer_points,
            total_score=from_dealer + from_non_dealer * (NUM_PLAYERS - 2) + stick_payment,
            is_dealer_winner=False,
            is_self_draw=True,
            from_dealer=from_dealer,
            from_non_dealer=from_non_dealer,
            honba_payment=honba_per_loser * (NUM_PLAYERS - 1),
            stick_payment=stick_payment,
        )

    base_points = pattern.dealer_points if request.is_dealer_winner else pattern.non_dealer_points
    from_discarder = base_points + honba_payment
    return ScoreResult(
        han=request.han,
        fu=request.fu,
        base_points=base_points,
        total_score=from_discarder + stick_payment,
        is_dealer_winner=request.is_dealer_winner,
        is_self_draw=False,
        from_discarder=from_discarder,
        honba_payment=honba_payment,
        stick_payment=stick_payment,
    )
