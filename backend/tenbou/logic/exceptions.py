"""Typed domain exceptions for the score-keeping engine.

Caller-correctable problems derive from InvalidDeclarationError and are raised
before any state is touched. PatternNotFoundError and InvariantViolationError
indicate data or logic defects and must never be converted into a default
value; the service layer logs them and refuses to persist.
"""


class EngineError(Exception):
    """Base exception for all engine errors."""


class InvalidDeclarationError(EngineError):
    """A win, draw or riichi declaration is malformed or not allowed right now."""


class InvalidSeatError(InvalidDeclarationError):
    """Seat index out of range or unknown player id."""


class InvalidWinError(InvalidDeclarationError):
    """Win declaration has an invalid han/fu or winner/loser combination."""


class InvalidDrawError(InvalidDeclarationError):
    """Draw declaration lists invalid or duplicate ready seats."""


class InvalidRiichiError(InvalidDeclarationError):
    """Riichi declared twice or with fewer points than the deposit."""


class UnsupportedSettingsError(EngineError):
    """Game settings contain values the engine cannot honor."""


class GameNotFoundError(EngineError):
    """No game with the given id exists in the repository."""

    def __init__(self, game_id: str) -> None:
        self.game_id = game_id
        super().__init__(f"game {game_id!r} not found")


class GameNotPlayableError(EngineError):
    """Operation attempted on a game that is not in PLAYING status."""


class NothingToUndoError(EngineError):
    """The event log holds no undoable event."""


class PatternNotFoundError(EngineError):
    """The (han, fu) score table has no row for a requested combination.

    This is a data-completeness defect, not a user error.
    """

    def __init__(self, han: int, fu: int) -> None:
        self.han = han
        self.fu = fu
        super().__init__(f"no score pattern for {han} han {fu} fu")


class InvariantViolationError(EngineError):
    """A zero-sum or ledger-total invariant failed after a computation."""
