"""
String enum definitions for score-keeping concepts.
"""

from enum import StrEnum


class GameFormat(StrEnum):
    """Game length."""

    TONPUU = "tonpuu"  # East only, 4 rounds
    HANCHAN = "hanchan"  # East + South, 8 rounds


class GameMode(StrEnum):
    """How seats are identified by callers."""

    MULTIPLAYER = "multiplayer"  # seats addressed by player id
    SOLO = "solo"  # seats addressed by position 0-3


class GameStatus(StrEnum):
    """Lifecycle of a game ledger."""

    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class EndReason(StrEnum):
    """Why a game finished."""

    BUST = "bust"
    ROUND_LIMIT = "round_limit"
    FORCED = "forced"


class RoundOutcome(StrEnum):
    """Outcome of a hand as seen by the dealer rotation rule."""

    DEALER_WIN = "dealer_win"
    NON_DEALER_WIN = "non_dealer_win"
    DRAW_DEALER_READY = "draw_dealer_ready"
    DRAW_DEALER_NOT_READY = "draw_dealer_not_ready"


class DrawReason(StrEnum):
    """Kinds of drawn hands recorded on draw events."""

    EXHAUSTIVE = "exhaustive"
    NINE_TERMINALS = "nine_terminals"
    FOUR_RIICHI = "four_riichi"
    TRIPLE_RON = "triple_ron"
    FOUR_KANS = "four_kans"
    FOUR_WINDS = "four_winds"


class EventType(StrEnum):
    """Entries of the per-game event log."""

    TSUMO = "tsumo"
    RON = "ron"
    RIICHI = "riichi"
    DRAW = "draw"
    GAME_END = "game_end"
    UNDO = "undo"


# event types that can be reverted by undo
UNDOABLE_EVENTS = frozenset({EventType.TSUMO, EventType.RON, EventType.RIICHI, EventType.DRAW})


class LimitHand(StrEnum):
    """Named limit-hand tiers. Fu no longer matters from mangan upwards."""

    MANGAN = "mangan"
    HANEMAN = "haneman"
    BAIMAN = "baiman"
    SANBAIMAN = "sanbaiman"
    YAKUMAN = "yakuman"
