"""
Verifies final ranking, rounding toward zero, uma and the zero-sum
settlement.
"""

import itertools

import pytest

from tenbou.logic.exceptions import InvariantViolationError
from tenbou.logic.settings import GameSettings
from tenbou.logic.settlement import calculate_settlement, rank_seats, settle_ledger
from tenbou.tests.conftest import create_ledger

UMA = (20, 10, -10, -20)


class TestRanking:
    def test_orders_by_points(self):
        assert rank_seats([10000, 40000, 20000, 30000]) == [1, 3, 2, 0]

    def test_ties_go_to_lower_seat(self):
        assert rank_seats([25000, 25000, 25000, 25000]) == [0, 1, 2, 3]
        assert rank_seats([20000, 30000, 20000, 30000]) == [1, 3, 0, 2]


class TestRounding:
    def test_positive_difference_is_floored(self):
        rows = calculate_settlement([45000, 35900, 12000, 7100], 30000, UMA)
        assert rows[1].seat == 1
        assert rows[1].raw_diff == 5900
        assert rows[1].rounded_diff == 5
        assert rows[1].settlement == 15

    def test_negative_difference_rounds_toward_zero(self):
        rows = calculate_settlement([45900, 24100, 18000, 12000], 30000, UMA)
        by_seat = {row.seat: row for row in rows}
        assert by_seat[1].raw_diff == -5900
        assert by_seat[1].rounded_diff == -5
        assert by_seat[2].rounded_diff == -12
        assert by_seat[3].rounded_diff == -18

    def test_first_place_absorbs_rounding(self):
        rows = calculate_settlement([45900, 24100, 18000, 12000], 30000, UMA)
        first = rows[0]
        assert first.seat == 0
        assert first.raw_diff == 15900
        assert first.rounded_diff == 5 + 12 + 18
        assert first.settlement == 35 + 20


class TestSettlementRows:
    def test_worked_example(self):
        rows = calculate_settlement([42000, 31000, 17000, 10000], 30000, UMA)
        assert [(r.seat, r.rank, r.rounded_diff, r.uma, r.settlement) for r in rows] == [
            (0, 1, 32, 20, 52),
            (1, 2, 1, 10, 11),
            (2, 3, -13, -10, -23),
            (3, 4, -20, -20, -40),
        ]

    def test_even_table(self):
        rows = calculate_settlement([25000, 25000, 25000, 25000], 30000, UMA)
        assert [r.settlement for r in rows] == [35, 5, -15, -25]

    def test_negative_points(self):
        rows = calculate_settlement([77000, 30000, 20000, -27000], 30000, UMA)
        assert rows[3].seat == 3
        assert rows[3].rounded_diff == -57
        assert sum(r.settlement for r in rows) == 0

    def test_settle_ledger_uses_its_settings(self):
        ledger = create_ledger(
            points=(40000, 30000, 20000, 10000),
            settings=GameSettings(base_points=25000, uma=(30, 10, -10, -30)),
        )
        rows = settle_ledger(ledger)
        assert [r.settlement for r in rows] == [15 + 30, 5 + 10, -5 - 10, -15 - 30]


class TestZeroSum:
    @pytest.mark.parametrize("uma", [UMA, (30, 10, -10, -30), (15, 5, -5, -15), (0, 0, 0, 0), (40, 0, -10, -30)])
    @pytest.mark.parametrize(
        "points",
        [
            (25000, 25000, 25000, 25000),
            (45900, 24100, 18000, 12000),
            (31500, 29500, 26100, 12900),
            (100000, 0, 0, 0),
            (61400, 40100, 200, -1700),
        ],
    )
    def test_settlement_sums_to_zero(self, uma, points):
        for permutation in set(itertools.permutations(points)):
            rows = calculate_settlement(list(permutation), 30000, uma)
            assert sum(r.settlement for r in rows) == 0
            assert sorted(r.rank for r in rows) == [1, 2, 3, 4]

    def test_non_zero_sum_uma_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolationError, match="settlement sums to 5"):
            calculate_settlement([25000, 25000, 25000, 25000], 30000, (25, 10, -10, -20))


class TestIdempotence:
    def test_same_ledger_same_rows(self):
        ledger = create_ledger(points=(31500, 29500, 26100, 12900))
        assert settle_ledger(ledger) == settle_ledger(ledger)
