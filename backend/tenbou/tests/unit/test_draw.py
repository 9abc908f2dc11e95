"""
Verifies drawn-hand noten payments and their side effects on the ledger.
"""

import pytest

from tenbou.logic.draw import calculate_noten_payments, resolve_draw
from tenbou.logic.enums import DrawReason
from tenbou.logic.exceptions import InvalidDrawError
from tenbou.logic.types import DrawDeclaration
from tenbou.tests.conftest import create_ledger, create_seat


class TestNotenPayments:
    def test_one_ready(self):
        assert calculate_noten_payments(frozenset({2}), 3000) == {0: -1000, 1: -1000, 2: 3000, 3: -1000}

    def test_two_ready(self):
        assert calculate_noten_payments(frozenset({0, 3}), 3000) == {0: 1500, 1: -1500, 2: -1500, 3: 1500}

    def test_three_ready(self):
        assert calculate_noten_payments(frozenset({0, 1, 2}), 3000) == {0: 1000, 1: 1000, 2: 1000, 3: -3000}

    @pytest.mark.parametrize("ready", [frozenset(), frozenset({0, 1, 2, 3})])
    def test_all_or_none_ready_moves_nothing(self, ready):
        assert calculate_noten_payments(ready, 3000) == {0: 0, 1: 0, 2: 0, 3: 0}

    @pytest.mark.parametrize("pool", [0, 1200, 3000, 6000])
    @pytest.mark.parametrize("ready", [frozenset({1}), frozenset({1, 2}), frozenset({0, 1, 2})])
    def test_multiple_of_six_pools_are_conserved(self, pool, ready):
        assert sum(calculate_noten_payments(ready, pool).values()) == 0

    def test_truncation_is_independent(self):
        # a pool that does not split evenly is truncated separately on each side
        assert calculate_noten_payments(frozenset({0, 1}), 1001) == {0: 500, 1: 500, 2: -500, 3: -500}
        assert calculate_noten_payments(frozenset({0}), 1000) == {0: 1000, 1: -333, 2: -333, 3: -333}


class TestResolveDraw:
    def test_applies_payments(self):
        ledger, result = resolve_draw(create_ledger(), DrawDeclaration(ready_seats=frozenset({1})))
        assert ledger.points == (24000, 28000, 24000, 24000)
        assert result.ready_seats == [1]
        assert result.not_ready_seats == [0, 2, 3]
        assert result.dealer_ready is False

    def test_reports_dealer_ready(self):
        _, result = resolve_draw(create_ledger(dealer_seat=3), DrawDeclaration(ready_seats=frozenset({3, 0})))
        assert result.dealer_ready is True
        assert result.ready_seats == [0, 3]

    def test_pool_carries_over_and_riichi_clears(self):
        seats = [
            create_seat(0, points=24000, is_riichi=True, riichi_round=1),
            create_seat(1),
            create_seat(2),
            create_seat(3),
        ]
        ledger, _ = resolve_draw(create_ledger(seats=seats, stick_pool=1), DrawDeclaration(ready_seats=frozenset({0})))
        assert ledger.stick_pool == 1
        assert not ledger.seats[0].is_riichi
        assert ledger.points == (27000, 24000, 24000, 24000)

    def test_reason_recorded(self):
        _, result = resolve_draw(create_ledger(), DrawDeclaration(reason=DrawReason.FOUR_WINDS))
        assert result.reason == DrawReason.FOUR_WINDS
        assert result.score_changes == {0: 0, 1: 0, 2: 0, 3: 0}

    def test_does_not_rotate(self):
        ledger, _ = resolve_draw(create_ledger(honba=2), DrawDeclaration())
        assert (ledger.dealer_seat, ledger.honba, ledger.round) == (0, 2, 1)

    def test_invalid_seat_rejected(self):
        with pytest.raises(InvalidDrawError, match=r"invalid ready seats \[4\]"):
            resolve_draw(create_ledger(), DrawDeclaration(ready_seats=frozenset({1, 4})))
