from datetime import UTC, datetime

from shared.dal.models import StoredGame
from tenbou.logic.game import init_game
from tenbou.logic.types import SeatConfig


def create_stored_game(
    game_id: str = "g1",
    *,
    series_id: str | None = None,
    created_at: datetime | None = None,
) -> StoredGame:
    """Create a freshly started StoredGame for repository tests."""
    ledger = init_game(game_id, [SeatConfig(name=name) for name in ("East", "South", "West", "North")])
    timestamp = created_at or datetime(2025, 1, 15, 12, 0, 0, tzinfo=UTC)
    return StoredGame(
        game_id=game_id,
        series_id=series_id,
        initial_ledger=ledger,
        ledger=ledger,
        created_at=timestamp,
        updated_at=timestamp,
    )
