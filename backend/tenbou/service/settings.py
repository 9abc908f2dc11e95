"""Engine service configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from shared.validators import IntListEnvSettingsSource, parse_int_list
from tenbou.logic.enums import GameFormat
from tenbou.logic.settings import NUM_PLAYERS, GameSettings

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class EngineServerSettings(BaseSettings):
    model_config = {"env_prefix": "TENBOU_"}

    database_path: str = Field(default="backend/data/tenbou.db", min_length=1)
    log_dir: str = Field(default="backend/logs/tenbou", min_length=1)

    # defaults for games created without explicit settings
    default_game_format: GameFormat = GameFormat.HANCHAN
    default_initial_points: int = Field(default=25000, gt=0)
    default_base_points: int = Field(default=30000, gt=0)
    default_uma: tuple[int, int, int, int] = (20, 10, -10, -20)

    @field_validator("default_uma", mode="before")
    @classmethod
    def validate_default_uma(cls, v: str | list[int] | tuple[int, ...]) -> tuple[int, ...]:
        values = parse_int_list(v, length=NUM_PLAYERS)
        if sum(values) != 0:
            raise ValueError(f"uma must sum to zero, got {values}")
        return tuple(values)

    def game_settings(self, game_format: GameFormat | None = None) -> GameSettings:
        """Build the rules for a new game from the configured defaults."""
        return GameSettings(
            game_format=game_format or self.default_game_format,
            initial_points=self.default_initial_points,
            base_points=self.default_base_points,
            uma=self.default_uma,
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, IntListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
