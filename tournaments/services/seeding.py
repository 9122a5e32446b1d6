"""Baseline data loaded into an empty store."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from ..models import Game, Tournament
from ..repositories import UnitOfWork
from ..results import Result

logger = logging.getLogger(__name__)

SEED_TOURNAMENTS = [
    ("Spring Open", datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)),
    ("Summer Cup", datetime(2025, 6, 14, 9, 0, tzinfo=timezone.utc)),
    ("Autumn Masters", datetime(2025, 9, 20, 12, 0, tzinfo=timezone.utc)),
]

SEED_GAMES = ["Quarterfinal", "Semifinal", "Final"]


def seed_data(unit_of_work: UnitOfWork | None = None) -> Result:
    """Insert the baseline tournaments and games unless any tournament exists.

    Returns ``success(True)`` when data was inserted, ``success(False)`` when
    the store already held data, or the failed commit result.
    """

    uow = unit_of_work or UnitOfWork()
    if Tournament.objects.exists():
        logger.info("seed.skipped reason=not_empty")
        return Result.success(False)

    for title, start in SEED_TOURNAMENTS:
        tournament = Tournament(title=title, start_date=start)
        uow.tournaments.add(tournament)
        for day, game_title in enumerate(SEED_GAMES):
            uow.games.add(
                Game(
                    title=f"{title} {game_title}",
                    time=start + timedelta(days=day, hours=day * 2),
                    tournament=tournament,
                )
            )
    result = uow.complete()
    if not result.succeeded:
        return result
    logger.info(
        "seed.loaded tournaments=%s games=%s",
        len(SEED_TOURNAMENTS),
        len(SEED_TOURNAMENTS) * len(SEED_GAMES),
    )
    return Result.success(True)
