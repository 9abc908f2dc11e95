"""
Verifies dealer continuation and rotation, and the honba counter, for every
kind of hand outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tenbou.logic.enums import DrawReason, EventType, RoundOutcome
from tenbou.logic.game import get_round_outcome, process_round_end
from tenbou.logic.scoring import ScoreResult
from tenbou.logic.types import DrawResult, WinResult
from tenbou.tests.conftest import create_ledger

if TYPE_CHECKING:
    from tenbou.logic.state import GameLedger


def _ledger(*, dealer_seat: int = 0, honba: int = 0, round_number: int = 1) -> GameLedger:
    return create_ledger(dealer_seat=dealer_seat, honba=honba, round_number=round_number)


def _win_result(winner_seat: int) -> WinResult:
    score = ScoreResult(
        han=1,
        fu=30,
        base_points=1000,
        total_score=1000,
        is_dealer_winner=False,
        is_self_draw=False,
        from_discarder=1000,
        honba_payment=0,
        stick_payment=0,
    )
    return WinResult(
        type=EventType.RON,
        winner_seat=winner_seat,
        loser_seat=(winner_seat + 1) % 4,
        score=score,
        score_changes={0: 0, 1: 0, 2: 0, 3: 0},
        riichi_sticks_collected=0,
    )


def _draw_result(*, dealer_ready: bool) -> DrawResult:
    return DrawResult(
        reason=DrawReason.EXHAUSTIVE,
        ready_seats=[],
        not_ready_seats=[],
        dealer_ready=dealer_ready,
        score_changes={0: 0, 1: 0, 2: 0, 3: 0},
    )


class TestRoundOutcome:
    def test_dealer_win(self):
        assert get_round_outcome(_ledger(dealer_seat=2), _win_result(2)) == RoundOutcome.DEALER_WIN

    def test_non_dealer_win(self):
        assert get_round_outcome(_ledger(dealer_seat=2), _win_result(0)) == RoundOutcome.NON_DEALER_WIN

    def test_draw(self):
        assert get_round_outcome(_ledger(), _draw_result(dealer_ready=True)) == RoundOutcome.DRAW_DEALER_READY
        assert get_round_outcome(_ledger(), _draw_result(dealer_ready=False)) == RoundOutcome.DRAW_DEALER_NOT_READY


class TestDealerContinuation:
    @pytest.mark.parametrize("outcome", [RoundOutcome.DEALER_WIN, RoundOutcome.DRAW_DEALER_READY])
    def test_keeps_dealer_and_round(self, outcome):
        ledger = process_round_end(_ledger(dealer_seat=1, honba=2, round_number=2), outcome)
        assert ledger.dealer_seat == 1
        assert ledger.honba == 3
        assert ledger.round == 2

    def test_repeated_continuation_accumulates_honba(self):
        ledger = _ledger()
        for _ in range(4):
            ledger = process_round_end(ledger, RoundOutcome.DEALER_WIN)
        assert ledger.honba == 4
        assert ledger.round == 1


class TestDealerRotation:
    @pytest.mark.parametrize("outcome", [RoundOutcome.NON_DEALER_WIN, RoundOutcome.DRAW_DEALER_NOT_READY])
    def test_passes_deal(self, outcome):
        ledger = process_round_end(_ledger(dealer_seat=1, honba=2, round_number=2), outcome)
        assert ledger.dealer_seat == 2
        assert ledger.honba == 0
        assert ledger.round == 3

    def test_wraps_from_north_to_east(self):
        ledger = process_round_end(_ledger(dealer_seat=3, round_number=4), RoundOutcome.NON_DEALER_WIN)
        assert ledger.dealer_seat == 0
        assert ledger.round == 5

    def test_leaves_points_and_sticks_alone(self):
        before = create_ledger(points=(24000, 26000, 25000, 24000), stick_pool=1)
        ledger = process_round_end(before, RoundOutcome.NON_DEALER_WIN)
        assert ledger.points == before.points
        assert ledger.stick_pool == 1
