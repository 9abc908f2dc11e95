"""
Game initialization and progression: dealer rotation, game end, finalization.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tenbou.logic.draw import resolve_draw
from tenbou.logic.enums import EndReason, GameMode, GameStatus, RoundOutcome
from tenbou.logic.exceptions import GameNotPlayableError, InvalidSeatError
from tenbou.logic.riichi import declare_riichi
from tenbou.logic.settings import NUM_PLAYERS, GameSettings, get_round_limit, validate_settings
from tenbou.logic.settlement import settle_ledger
from tenbou.logic.state import GameLedger, Seat
from tenbou.logic.state_utils import check_ledger_total
from tenbou.logic.types import DrawResult, GameEndResult, WinResult
from tenbou.logic.win import resolve_win

if TYPE_CHECKING:
    from tenbou.logic.score_table import ScorePatternTable
    from tenbou.logic.types import (
        DrawDeclaration,
        RiichiDeclaration,
        RiichiResult,
        RoundResult,
        SeatConfig,
        WinDeclaration,
    )

logger = structlog.get_logger()


def init_game(
    game_id: str,
    seat_configs: list[SeatConfig],
    settings: GameSettings | None = None,
    mode: GameMode = GameMode.SOLO,
    starting_dealer_seat: int = 0,
) -> GameLedger:
    """
    Initialize a new game ledger with seat configurations.

    All seats start with initial_points (from settings). Multiplayer games
    need a distinct player id on every seat.
    Returns a frozen GameLedger in PLAYING status.
    """
    game_settings = settings or GameSettings()

    validate_settings(game_settings)

    if len(seat_configs) != NUM_PLAYERS:
        raise InvalidSeatError(f"expected {NUM_PLAYERS} seats, got {len(seat_configs)}")
    if not (0 <= starting_dealer_seat < NUM_PLAYERS):
        raise InvalidSeatError(f"invalid starting dealer seat {starting_dealer_seat}")
    if mode == GameMode.MULTIPLAYER:
        player_ids = [config.player_id for config in seat_configs]
        if None in player_ids or len(set(player_ids)) != NUM_PLAYERS:
            raise InvalidSeatError(f"multiplayer games need {NUM_PLAYERS} distinct player ids, got {player_ids}")

    seats = tuple(
        Seat(
            position=i,
            name=config.name,
            player_id=config.player_id,
            points=game_settings.initial_points,
        )
        for i, config in enumerate(seat_configs)
    )

    return GameLedger(
        game_id=game_id,
        mode=mode,
        status=GameStatus.PLAYING,
        seats=seats,
        round=1,
        dealer_seat=starting_dealer_seat,
        starting_dealer_seat=starting_dealer_seat,
        honba=0,
        stick_pool=0,
        settings=game_settings,
    )


def require_playing(ledger: GameLedger) -> None:
    """Raise GameNotPlayableError unless the game accepts declarations."""
    if ledger.status != GameStatus.PLAYING:
        raise GameNotPlayableError(f"game {ledger.game_id} is {ledger.status}, not {GameStatus.PLAYING}")


def get_round_outcome(ledger: GameLedger, result: RoundResult) -> RoundOutcome:
    """Classify a resolved hand for the rotation rule."""
    if isinstance(result, WinResult):
        if ledger.is_dealer(result.winner_seat):
            return RoundOutcome.DEALER_WIN
        return RoundOutcome.NON_DEALER_WIN
    if isinstance(result, DrawResult):
        if result.dealer_ready:
            return RoundOutcome.DRAW_DEALER_READY
        return RoundOutcome.DRAW_DEALER_NOT_READY
    raise AssertionError(f"unexpected round result type: {type(result)}")  # pragma: no cover


def process_round_end(ledger: GameLedger, outcome: RoundOutcome) -> GameLedger:
    """
    Advance the round counters after a hand.

    Dealer continuation (dealer win, or draw with the dealer ready) adds one
    honba and keeps dealer and round. Otherwise the deal passes to the next
    seat, honba resets and the round advances.
    """
    if outcome in (RoundOutcome.DEALER_WIN, RoundOutcome.DRAW_DEALER_READY):
        new_ledger = ledger.model_copy(update={"honba": ledger.honba + 1})
        logger.info("dealer continues", dealer_seat=ledger.dealer_seat, honba=new_ledger.honba, outcome=outcome)
        return new_ledger

    new_ledger = ledger.model_copy(
        update={
            "dealer_seat": (ledger.dealer_seat + 1) % NUM_PLAYERS,
            "honba": 0,
            "round": ledger.round + 1,
        },
    )
    logger.info("dealer rotated", dealer_seat=new_ledger.dealer_seat, round=new_ledger.round, outcome=outcome)
    return new_ledger


def check_game_end(ledger: GameLedger) -> EndReason | None:
    """
    Check if the game should end.

    - Bust: any seat at or below zero points (when has_tobi)
    - Round limit: round past 4 for tonpuu, past 8 for hanchan

    Bust is reported when both apply.
    """
    settings = ledger.settings

    if settings.has_tobi and any(points <= 0 for points in ledger.points):
        return EndReason.BUST

    if ledger.round > get_round_limit(settings):
        return EndReason.ROUND_LIMIT

    return None


def finalize_game(
    ledger: GameLedger,
    reason: EndReason,
    detail: str | None = None,
) -> tuple[GameLedger, GameEndResult]:
    """
    Finalize the game and compute the settlement.

    Riichi sticks still in the pool stay there; nobody collects them.

    Returns (new_ledger, GameEndResult).
    """
    standings = settle_ledger(ledger)
    new_ledger = ledger.model_copy(update={"status": GameStatus.FINISHED, "end_reason": reason})

    logger.info(
        "game finished",
        reason=reason,
        detail=detail,
        winner_seat=standings[0].seat,
        standings=standings,
        leftover_sticks=new_ledger.stick_pool,
    )

    return new_ledger, GameEndResult(
        reason=reason,
        detail=detail,
        winner_seat=standings[0].seat,
        standings=standings,
    )


def _finish_hand(
    ledger: GameLedger,
    resolved: GameLedger,
    result: RoundResult,
) -> tuple[GameLedger, GameEndResult | None]:
    """Rotate, verify the ledger total and finalize if an end condition holds."""
    outcome = get_round_outcome(ledger, result)
    new_ledger = process_round_end(resolved, outcome)
    check_ledger_total(new_ledger)

    reason = check_game_end(new_ledger)
    if reason is None:
        return new_ledger, None
    return finalize_game(new_ledger, reason)


def process_win(
    ledger: GameLedger,
    declaration: WinDeclaration,
    table: ScorePatternTable,
) -> tuple[GameLedger, WinResult, GameEndResult | None]:
    """
    Apply a declared win: resolve, rotate, check game end.

    Returns (new_ledger, WinResult, GameEndResult or None).
    """
    require_playing(ledger)
    resolved, result = resolve_win(ledger, declaration, table)
    new_ledger, end_result = _finish_hand(ledger, resolved, result)
    return new_ledger, result, end_result


def process_draw(
    ledger: GameLedger,
    declaration: DrawDeclaration,
) -> tuple[GameLedger, DrawResult, GameEndResult | None]:
    """
    Apply a drawn hand: noten payments, rotate, check game end.

    Returns (new_ledger, DrawResult, GameEndResult or None).
    """
    require_playing(ledger)
    resolved, result = resolve_draw(ledger, declaration)
    new_ledger, end_result = _finish_hand(ledger, resolved, result)
    return new_ledger, result, end_result


def process_riichi(ledger: GameLedger, declaration: RiichiDeclaration) -> tuple[GameLedger, RiichiResult]:
    """
    Apply a riichi deposit. The hand continues, so there is no rotation
    and no end check.
    """
    require_playing(ledger)
    new_ledger, result = declare_riichi(ledger, declaration.seat)
    check_ledger_total(new_ledger)
    return new_ledger, result


def force_end(ledger: GameLedger, detail: str | None = None) -> tuple[GameLedger, GameEndResult]:
    """End a playing game on request and settle it as it stands."""
    require_playing(ledger)
    return finalize_game(ledger, EndReason.FORCED, detail)
