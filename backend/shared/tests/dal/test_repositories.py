"""Behaviour shared by every GameRepository implementation."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from shared.dal.memory import InMemoryGameRepository
from shared.db.connection import Database
from shared.db.game_repository import SqliteGameRepository
from shared.tests.conftest import create_stored_game
from tenbou.logic.statistics import PlayerSeriesStats, SeriesStatistics

if TYPE_CHECKING:
    from pathlib import Path

    from shared.dal.game_repository import GameRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request: pytest.FixtureRequest, tmp_path: Path):
    if request.param == "memory":
        yield InMemoryGameRepository()
        return
    db = Database(tmp_path / "test.db")
    db.connect()
    yield SqliteGameRepository(db)
    db.close()


class TestCreateAndGet:
    async def test_create_and_get_game(self, repo: GameRepository) -> None:
        game = create_stored_game("g1")
        assert await repo.create_game(game) is True

        result = await repo.get_game("g1")
        assert result == game

    async def test_get_returns_none_for_unknown(self, repo: GameRepository) -> None:
        assert await repo.get_game("nonexistent") is None

    async def test_duplicate_create_is_rejected_without_overwrite(self, repo: GameRepository) -> None:
        first = create_stored_game("g1", series_id="s1")
        await repo.create_game(first)

        assert await repo.create_game(create_stored_game("g1", series_id="other")) is False
        result = await repo.get_game("g1")
        assert result is not None
        assert result.series_id == "s1"


class TestSaveGame:
    async def test_save_replaces_snapshot(self, repo: GameRepository) -> None:
        game = create_stored_game("g1")
        await repo.create_game(game)

        moved = game.ledger.model_copy(update={"honba": 2, "round": 3})
        await repo.save_game(game.model_copy(update={"ledger": moved}))

        result = await repo.get_game("g1")
        assert result is not None
        assert result.ledger.honba == 2
        assert result.ledger.round == 3
        assert result.initial_ledger.honba == 0

    async def test_save_unknown_game_raises(self, repo: GameRepository) -> None:
        with pytest.raises(KeyError):
            await repo.save_game(create_stored_game("missing"))


class TestListGames:
    async def test_most_recent_first(self, repo: GameRepository) -> None:
        for day in (1, 3, 2):
            await repo.create_game(
                create_stored_game(f"g{day}", created_at=datetime(2025, 1, day, tzinfo=UTC)),
            )

        games = await repo.list_games()
        assert [g.game_id for g in games] == ["g3", "g2", "g1"]

    async def test_limit(self, repo: GameRepository) -> None:
        for day in (1, 2, 3):
            await repo.create_game(
                create_stored_game(f"g{day}", created_at=datetime(2025, 1, day, tzinfo=UTC)),
            )

        games = await repo.list_games(limit=2)
        assert [g.game_id for g in games] == ["g3", "g2"]

    async def test_filter_by_series(self, repo: GameRepository) -> None:
        await repo.create_game(create_stored_game("a", series_id="s1"))
        await repo.create_game(create_stored_game("b", series_id="s2"))
        await repo.create_game(create_stored_game("c"))

        games = await repo.list_games(series_id="s1")
        assert [g.game_id for g in games] == ["a"]


class TestSeries:
    async def test_unknown_series_is_none(self, repo: GameRepository) -> None:
        assert await repo.get_series("s1") is None

    async def test_save_and_overwrite_series(self, repo: GameRepository) -> None:
        stats = SeriesStatistics(
            series_id="s1",
            players={"p1": PlayerSeriesStats(player_key="p1", name="Aki", total_games=1, rank_counts=(1, 0, 0, 0))},
            game_ids=("g1",),
        )
        await repo.save_series(stats)
        assert await repo.get_series("s1") == stats

        updated = stats.model_copy(update={"game_ids": ("g1", "g2")})
        await repo.save_series(updated)
        result = await repo.get_series("s1")
        assert result is not None
        assert result.game_ids == ("g1", "g2")
