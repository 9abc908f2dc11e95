"""
Reference (han, fu) -> points table.

Rows for 1-4 han are generated from the basic-points formula
``fu * 2 ** (han + 2)``; every payment is rounded up to the next 100.
From mangan upwards fu no longer matters and the five limit tiers carry
fixed values.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from tenbou.logic.enums import LimitHand
from tenbou.logic.exceptions import PatternNotFoundError

MIN_HAN = 1
MAX_HAN = 13
MIN_FU = 20
MAX_FU = 110
VALID_FU = (20, 25, 30, 40, 50, 60, 70, 80, 90, 100, 110)

# highest han that still uses the fu-based formula
MAX_REGULAR_HAN = 4

# han at which each limit tier starts
LIMIT_HAN: dict[LimitHand, int] = {
    LimitHand.MANGAN: 5,
    LimitHand.HANEMAN: 6,
    LimitHand.BAIMAN: 8,
    LimitHand.SANBAIMAN: 11,
    LimitHand.YAKUMAN: 13,
}

# (dealer discard value, non-dealer discard value)
_LIMIT_POINTS: dict[LimitHand, tuple[int, int]] = {
    LimitHand.MANGAN: (12000, 8000),
    LimitHand.HANEMAN: (18000, 12000),
    LimitHand.BAIMAN: (24000, 16000),
    LimitHand.SANBAIMAN: (36000, 24000),
    LimitHand.YAKUMAN: (48000, 32000),
}


class ScorePattern(BaseModel):
    """One row of the score table.

    ``fu`` is None for limit-hand rows.
    """

    model_config = ConfigDict(frozen=True)

    han: int
    fu: int | None
    dealer_points: int
    non_dealer_points: int
    dealer_self_draw_each: int
    non_dealer_self_draw_from_dealer: int
    non_dealer_self_draw_from_non_dealer: int
    limit: LimitHand | None = None


def _round_up_100(value: int) -> int:
    return -(-value // 100) * 100


def calculate_base_score(han: int, fu: int) -> int:
    """Basic points before the dealer/non-dealer multiplier."""
    return fu * 2 ** (han + 2)


def is_mangan(han: int, fu: int) -> bool:
    """True when the hand is worth at least a mangan regardless of its fu."""
    if han >= LIMIT_HAN[LimitHand.MANGAN]:
        return True
    if han == 3 and fu >= 70:  # noqa: PLR2004
        return True
    return han == MAX_REGULAR_HAN and fu >= 40  # noqa: PLR2004


def limit_hand_for(han: int, fu: int) -> LimitHand | None:
    """Return the limit tier a (han, fu) pair collapses to, or None for a regular hand."""
    if not is_mangan(han, fu):
        return None
    for limit in reversed(LIMIT_HAN):
        if han >= LIMIT_HAN[limit]:
            return limit
    return LimitHand.MANGAN


def validate_han_fu(han: int, fu: int) -> bool:
    """
    Check that a (han, fu) combination can exist.

    20 and 25 fu need at least 2 han. Below mangan the fu must be one of the
    tabulated values.
    """
    if not MIN_HAN <= han <= MAX_HAN:
        return False
    if not MIN_FU <= fu <= MAX_FU:
        return False
    if fu in (20, 25) and han < 2:  # noqa: PLR2004
        return False
    return is_mangan(han, fu) or fu in VALID_FU


def _regular_pattern(han: int, fu: int) -> ScorePattern:
    base = calculate_base_score(han, fu)
    return ScorePattern(
        han=han,
        fu=fu,
        dealer_points=_round_up_100(base * 6),
        non_dealer_points=_round_up_100(base * 4),
        dealer_self_draw_each=_round_up_100(base * 2),
        non_dealer_self_draw_from_dealer=_round_up_100(base * 2),
        non_dealer_self_draw_from_non_dealer=_round_up_100(base),
    )


def _limit_pattern(limit: LimitHand, *, han: int | None = None, fu: int | None = None) -> ScorePattern:
    dealer, non_dealer = _LIMIT_POINTS[limit]
    return ScorePattern(
        han=han if han is not None else LIMIT_HAN[limit],
        fu=fu,
        dealer_points=dealer,
        non_dealer_points=non_dealer,
        dealer_self_draw_each=_round_up_100(dealer // 3),
        non_dealer_self_draw_from_dealer=_round_up_100(non_dealer // 2),
        non_dealer_self_draw_from_non_dealer=_round_up_100(non_dealer // 4),
        limit=limit,
    )


def standard_patterns() -> list[ScorePattern]:
    """Generate every row of the standard table.

    Regular rows that already reach mangan (3 han 70+ fu, 4 han 40+ fu) hold
    mangan values so the table reads correctly on its own.
    """
    patterns: list[ScorePattern] = []
    for han in range(MIN_HAN, MAX_REGULAR_HAN + 1):
        for fu in VALID_FU:
            if fu in (20, 25) and han < 2:  # noqa: PLR2004
                continue
            if is_mangan(han, fu):
                patterns.append(_limit_pattern(LimitHand.MANGAN, han=han, fu=fu))
            else:
                patterns.append(_regular_pattern(han, fu))
    patterns.extend(_limit_pattern(limit) for limit in LIMIT_HAN)
    return patterns


class ScorePatternTable:
    """Immutable lookup over score patterns.

    The constructor refuses an incomplete table: every valid regular (han, fu)
    row and all five limit tiers must be present.
    """

    def __init__(self, patterns: Iterable[ScorePattern]) -> None:
        self._regular: dict[tuple[int, int], ScorePattern] = {}
        self._limits: dict[LimitHand, ScorePattern] = {}
        for pattern in patterns:
            if pattern.fu is None:
                if pattern.limit is None:
                    raise ValueError(f"pattern for {pattern.han} han has neither fu nor limit tier")
                self._limits[pattern.limit] = pattern
            else:
                self._regular[(pattern.han, pattern.fu)] = pattern
        self._verify_complete()

    def _verify_complete(self) -> None:
        for han in range(MIN_HAN, MAX_REGULAR_HAN + 1):
            for fu in VALID_FU:
                if fu in (20, 25) and han < 2:  # noqa: PLR2004
                    continue
                if (han, fu) not in self._regular:
                    raise PatternNotFoundError(han, fu)
        for limit, han in LIMIT_HAN.items():
            if limit not in self._limits:
                raise PatternNotFoundError(han, 0)

    def lookup(self, han: int, fu: int) -> ScorePattern:
        """
        Return the pattern used to pay a (han, fu) hand.

        Mangan-or-better hands are looked up by limit tier and the supplied fu
        is ignored.
        """
        limit = limit_hand_for(han, fu)
        if limit is not None:
            pattern = self._limits.get(limit)
        else:
            pattern = self._regular.get((han, fu))
        if pattern is None:
            raise PatternNotFoundError(han, fu)
        return pattern

    def with_pattern(self, pattern: ScorePattern) -> ScorePatternTable:
        """Return a copy of the table with one row replaced."""
        return ScorePatternTable([*self.patterns(), pattern])

    def patterns(self) -> list[ScorePattern]:
        """All rows ordered by han then fu, limit tiers last."""
        regular = [self._regular[key] for key in sorted(self._regular)]
        limits = [self._limits[limit] for limit in LIMIT_HAN if limit in self._limits]
        return regular + limits

    def __len__(self) -> int:
        return len(self._regular) + len(self._limits)


def build_standard_table() -> ScorePatternTable:
    return ScorePatternTable(standard_patterns())
