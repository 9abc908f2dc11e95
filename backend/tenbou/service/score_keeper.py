"""
Async score-keeping service.

Loads a game from the repository, applies one declaration through the logic
layer and saves the result, all under a per-game lock. A declaration that
fails validation or breaks an invariant leaves the stored game untouched.
"""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from shared.dal.models import StoredGame
from tenbou.logic.enums import DrawReason, EndReason, EventType, GameMode
from tenbou.logic.events import GameEvent, append_event, undo_last_event
from tenbou.logic.exceptions import (
    GameNotFoundError,
    GameNotPlayableError,
    InvalidDeclarationError,
    InvalidDrawError,
    InvariantViolationError,
)
from tenbou.logic.game import force_end, init_game, process_draw, process_riichi, process_win, require_playing
from tenbou.logic.score_table import build_standard_table
from tenbou.logic.settlement import settle_ledger
from tenbou.logic.state import GameLedger  # noqa: TC001
from tenbou.logic.state_utils import resolve_seat
from tenbou.logic.statistics import SeriesStatistics, record_game
from tenbou.logic.types import (
    DrawDeclaration,
    DrawResult,
    GameEndResult,
    RiichiDeclaration,
    RiichiResult,
    SeatConfig,
    SettlementRow,
    WinDeclaration,
    WinResult,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from shared.dal.game_repository import GameRepository
    from tenbou.logic.score_table import ScorePatternTable
    from tenbou.logic.scoring import ScoreResult
    from tenbou.logic.settings import GameSettings
    from tenbou.logic.state_utils import SeatRef
    from tenbou.service.settings import EngineServerSettings

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)
ResultT = TypeVar("ResultT")


class WinOutcome(BaseModel):
    ledger: GameLedger
    result: WinResult
    end: GameEndResult | None = None

    @property
    def score(self) -> ScoreResult:
        return self.result.score

    @property
    def score_changes(self) -> dict[int, int]:
        return self.result.score_changes

    @property
    def ended(self) -> bool:
        return self.end is not None

    @property
    def end_reason(self) -> EndReason | None:
        return self.end.reason if self.end else None

    @property
    def settlement(self) -> list[SettlementRow] | None:
        return self.end.standings if self.end else None


class DrawOutcome(BaseModel):
    ledger: GameLedger
    result: DrawResult
    end: GameEndResult | None = None

    @property
    def score_changes(self) -> dict[int, int]:
        return self.result.score_changes

    @property
    def ended(self) -> bool:
        return self.end is not None

    @property
    def end_reason(self) -> EndReason | None:
        return self.end.reason if self.end else None

    @property
    def settlement(self) -> list[SettlementRow] | None:
        return self.end.standings if self.end else None


class RiichiOutcome(BaseModel):
    ledger: GameLedger
    result: RiichiResult


class GameEndOutcome(BaseModel):
    ledger: GameLedger
    result: GameEndResult

    @property
    def settlement(self) -> list[SettlementRow]:
        return self.result.standings


class UndoOutcome(BaseModel):
    ledger: GameLedger
    undone: GameEvent


def _build(model: type[ModelT], **fields: Any) -> ModelT:  # noqa: ANN401
    """Build a declaration model, reporting malformed input as a declaration error."""
    try:
        return model(**fields)
    except ValidationError as e:
        raise InvalidDeclarationError(f"invalid {model.__name__}: {e}") from e


def _now() -> datetime:
    return datetime.now(UTC)


class ScoreKeeper:
    """
    Entry point for callers: one method per declaration.

    Seat arguments accept a position 0-3, or in multiplayer games a player id.
    """

    def __init__(
        self,
        repository: GameRepository,
        table: ScorePatternTable | None = None,
        settings: EngineServerSettings | None = None,
    ) -> None:
        self._repository = repository
        self._table = table or build_standard_table()
        self._settings = settings
        self._game_locks: dict[str, asyncio.Lock] = {}  # game_id -> Lock
        self._series_lock = asyncio.Lock()

    def _get_game_lock(self, game_id: str) -> asyncio.Lock:
        return self._game_locks.setdefault(game_id, asyncio.Lock())

    def _default_game_settings(self) -> GameSettings | None:
        return self._settings.game_settings() if self._settings is not None else None

    async def _load(self, game_id: str) -> StoredGame:
        stored = await self._repository.get_game(game_id)
        if stored is None:
            raise GameNotFoundError(game_id)
        return stored

    async def _load_playing(self, game_id: str) -> StoredGame:
        """Load a game that accepts declarations. A missing or finished game gives up its lock."""
        try:
            stored = await self._load(game_id)
            require_playing(stored.ledger)
        except (GameNotFoundError, GameNotPlayableError):
            self._game_locks.pop(game_id, None)
            raise
        return stored

    @staticmethod
    def _apply(operation: str, fn: Callable[..., ResultT], *args: Any) -> ResultT:  # noqa: ANN401
        """Run a logic-layer transaction; invariant failures are logged and re-raised unsaved."""
        try:
            return fn(*args)
        except InvariantViolationError:
            logger.exception("invariant violated, transaction discarded", operation=operation)
            raise

    async def _commit(
        self,
        stored: StoredGame,
        ledger: GameLedger,
        events: list[GameEvent],
        end: GameEndResult | None = None,
    ) -> None:
        """Persist the new snapshot. A finished game also drops its lock and updates its series."""
        update: dict[str, Any] = {"ledger": ledger, "events": events, "updated_at": _now()}
        if end is not None:
            update["settlement"] = end.standings
        await self._repository.save_game(stored.model_copy(update=update))

        if end is not None:
            self._game_locks.pop(stored.game_id, None)
            if stored.series_id is not None:
                await self._record_series(stored.series_id, ledger, end.standings)

    async def _record_series(self, series_id: str, ledger: GameLedger, standings: list[SettlementRow]) -> None:
        async with self._series_lock:
            stats = await self._repository.get_series(series_id) or SeriesStatistics(series_id=series_id)
            updated = record_game(stats, ledger, standings)
            if updated is not stats:
                await self._repository.save_series(updated)

    @staticmethod
    def _end_events(events: list[GameEvent], ledger: GameLedger, end: GameEndResult | None) -> list[GameEvent]:
        if end is None:
            return events
        return append_event(events, EventType.GAME_END, ledger, {"reason": end.reason.value, "detail": end.detail})

    async def create_game(  # noqa: PLR0913
        self,
        game_id: str,
        players: Sequence[SeatConfig | str],
        settings: GameSettings | None = None,
        mode: GameMode = GameMode.SOLO,
        starting_dealer_seat: int = 0,
        series_id: str | None = None,
    ) -> GameLedger:
        """
        Start a new game with four seats at the initial points.

        Players are SeatConfigs, or plain names for solo games.
        Raises InvalidDeclarationError when the id is already in use.
        """
        with structlog.contextvars.bound_contextvars(game_id=game_id):
            seat_configs = [
                _build(SeatConfig, name=player) if isinstance(player, str) else player for player in players
            ]
            ledger = init_game(
                game_id,
                seat_configs,
                settings=settings or self._default_game_settings(),
                mode=mode,
                starting_dealer_seat=starting_dealer_seat,
            )
            now = _now()
            stored = StoredGame(
                game_id=game_id,
                series_id=series_id,
                initial_ledger=ledger,
                ledger=ledger,
                created_at=now,
                updated_at=now,
            )
            async with self._get_game_lock(game_id):
                if not await self._repository.create_game(stored):
                    raise InvalidDeclarationError(f"game {game_id!r} already exists")
            logger.info("game created", mode=mode, game_format=ledger.format, dealer_seat=ledger.dealer_seat)
            return ledger

    async def declare_win(  # noqa: PLR0913
        self,
        game_id: str,
        winner: SeatRef,
        loser: SeatRef | None,
        han: int,
        fu: int,
        *,
        is_self_draw: bool,
    ) -> WinOutcome:
        """Score a tsumo (``is_self_draw``) or a ron against ``loser``."""
        with structlog.contextvars.bound_contextvars(game_id=game_id):
            async with self._get_game_lock(game_id):
                stored = await self._load_playing(game_id)
                ledger = stored.ledger
                declaration = _build(
                    WinDeclaration,
                    winner_seat=resolve_seat(ledger, winner),
                    loser_seat=resolve_seat(ledger, loser) if loser is not None else None,
                    han=han,
                    fu=fu,
                    is_self_draw=is_self_draw,
                )
                new_ledger, result, end = self._apply("win", process_win, ledger, declaration, self._table)

                events = append_event(stored.events, result.type, ledger, declaration.model_dump(mode="json"))
                events = self._end_events(events, new_ledger, end)
                await self._commit(stored, new_ledger, events, end)
                return WinOutcome(ledger=new_ledger, result=result, end=end)

    async def declare_draw(
        self,
        game_id: str,
        ready_seats: Iterable[SeatRef],
        reason: DrawReason = DrawReason.EXHAUSTIVE,
    ) -> DrawOutcome:
        """Record a drawn hand with the seats that were ready."""
        with structlog.contextvars.bound_contextvars(game_id=game_id):
            async with self._get_game_lock(game_id):
                stored = await self._load_playing(game_id)
                ledger = stored.ledger
                positions = [resolve_seat(ledger, ref) for ref in ready_seats]
                if len(set(positions)) != len(positions):
                    raise InvalidDrawError(f"duplicate ready seats {positions}")
                declaration = _build(DrawDeclaration, ready_seats=frozenset(positions), reason=reason)
                new_ledger, result, end = self._apply("draw", process_draw, ledger, declaration)

                events = append_event(stored.events, EventType.DRAW, ledger, declaration.model_dump(mode="json"))
                events = self._end_events(events, new_ledger, end)
                await self._commit(stored, new_ledger, events, end)
                return DrawOutcome(ledger=new_ledger, result=result, end=end)

    async def declare_riichi(self, game_id: str, seat: SeatRef) -> RiichiOutcome:
        """Take the riichi deposit from a seat."""
        with structlog.contextvars.bound_contextvars(game_id=game_id):
            async with self._get_game_lock(game_id):
                stored = await self._load_playing(game_id)
                ledger = stored.ledger
                declaration = _build(RiichiDeclaration, seat=resolve_seat(ledger, seat))
                new_ledger, result = self._apply("riichi", process_riichi, ledger, declaration)

                events = append_event(stored.events, EventType.RIICHI, ledger, declaration.model_dump(mode="json"))
                await self._commit(stored, new_ledger, events)
                return RiichiOutcome(ledger=new_ledger, result=result)

    async def force_end(self, game_id: str, reason: str | None = None) -> GameEndOutcome:
        """End a playing game now and settle it as it stands."""
        with structlog.contextvars.bound_contextvars(game_id=game_id):
            async with self._get_game_lock(game_id):
                stored = await self._load_playing(game_id)
                new_ledger, end = self._apply("force_end", force_end, stored.ledger, reason)

                events = self._end_events(stored.events, new_ledger, end)
                await self._commit(stored, new_ledger, events, end)
                return GameEndOutcome(ledger=new_ledger, result=end)

    async def undo_last(self, game_id: str) -> UndoOutcome:
        """Revert the most recent win, draw or riichi of a playing game."""
        with structlog.contextvars.bound_contextvars(game_id=game_id):
            async with self._get_game_lock(game_id):
                stored = await self._load_playing(game_id)
                new_ledger, events, undone = self._apply(
                    "undo", undo_last_event, stored.initial_ledger, stored.events, self._table
                )
                await self._commit(stored, new_ledger, events)
                return UndoOutcome(ledger=new_ledger, undone=undone)

    async def get_ledger(self, game_id: str) -> GameLedger:
        return (await self._load(game_id)).ledger

    async def get_settlement(self, game_id: str) -> list[SettlementRow]:
        """Final settlement of a finished game, or provisional standings of one in play."""
        stored = await self._load(game_id)
        if stored.settlement is not None:
            return stored.settlement
        return settle_ledger(stored.ledger)

    async def get_events(self, game_id: str) -> list[GameEvent]:
        return (await self._load(game_id)).events

    async def get_series_statistics(self, series_id: str) -> SeriesStatistics:
        return await self._repository.get_series(series_id) or SeriesStatistics(series_id=series_id)
