"""Centralized game settings - all configurable scoring rules."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from tenbou.logic.enums import GameFormat
from tenbou.logic.exceptions import UnsupportedSettingsError

NUM_PLAYERS = 4

# noten payments must split evenly between 1, 2 or 3 ready seats
_NOTEN_POOL_DIVISOR = 6


class GameSettings(BaseModel):
    """
    Configuration for one game's scoring rules.

    Defaults match the common table rules: 25000 start, 30000 return,
    uma 20-10 with tobi enabled.
    """

    model_config = ConfigDict(frozen=True)

    # --- Game Structure ---
    game_format: GameFormat = GameFormat.HANCHAN
    initial_points: int = 25000
    base_points: int = 30000

    # --- Settlement ---
    uma: tuple[int, int, int, int] = (20, 10, -10, -20)
    has_tobi: bool = True

    # --- Round Flow ---
    riichi_cost: int = 1000
    riichi_stick_value: int = 1000
    honba_tsumo_bonus_per_loser: int = 100
    honba_ron_bonus: int = 300
    noten_penalty_total: int = 3000

    @field_validator("uma")
    @classmethod
    def validate_uma(cls, v: tuple[int, int, int, int]) -> tuple[int, int, int, int]:
        if sum(v) != 0:
            raise ValueError(f"uma must sum to zero, got {list(v)} (sum {sum(v)})")
        return v


def validate_settings(settings: GameSettings) -> None:
    """Validate that all settings values are supported by the engine.

    Raises UnsupportedSettingsError listing every problem found.
    """
    errors: list[str] = []

    if settings.initial_points <= 0:
        errors.append(f"initial_points={settings.initial_points} must be positive")

    if settings.base_points <= 0:
        errors.append(f"base_points={settings.base_points} must be positive")

    if settings.riichi_cost <= 0 or settings.riichi_stick_value != settings.riichi_cost:
        errors.append(
            f"riichi_cost={settings.riichi_cost} and riichi_stick_value={settings.riichi_stick_value} "
            "must be equal and positive (the pool must pay out exactly what was deposited)"
        )

    if settings.noten_penalty_total < 0 or settings.noten_penalty_total % _NOTEN_POOL_DIVISOR:
        errors.append(
            f"noten_penalty_total={settings.noten_penalty_total} must be a non-negative multiple of "
            f"{_NOTEN_POOL_DIVISOR} so every ready/not-ready split is conserved"
        )

    if errors:
        raise UnsupportedSettingsError("; ".join(errors))


def get_round_limit(settings: GameSettings) -> int:
    """Return the last playable round number for the configured format."""
    if settings.game_format == GameFormat.TONPUU:
        return NUM_PLAYERS
    return NUM_PLAYERS * 2
