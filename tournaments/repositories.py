"""Repositories and the unit-of-work that commits their queued writes.

Reads hit the database straight away. Writes are queued on the owning
:class:`UnitOfWork` and only reach the database when :meth:`UnitOfWork.complete`
runs them inside a single transaction.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Tuple

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F, Prefetch

from .models import Game, Tournament
from .results import Result

logger = logging.getLogger(__name__)


class StaleWrite(Exception):
    """A queued update or delete matched no row."""

    def __init__(self, model, pk):
        super().__init__(f"{model.__name__} {pk} changed or vanished")
        self.model = model
        self.pk = pk


class Repository:
    model = None
    # fields copied by ``update``; ``version`` is bumped separately
    updatable_fields: Tuple[str, ...] = ()
    # lower-cased ``sortBy`` value -> model field
    sort_fields: dict = {}

    def __init__(self, unit_of_work: UnitOfWork):
        self._uow = unit_of_work

    def queryset(self):
        return self.model.objects.all()

    def ordering(self, sort_by: Optional[str]) -> Tuple[str, ...]:
        field = self.sort_fields.get((sort_by or "").strip().lower())
        if field is None:
            return ("pk",)
        return (field, "pk")

    def get_all(self, sort_by: Optional[str] = None) -> list:
        return list(self.queryset().order_by(*self.ordering(sort_by)))

    def get(self, pk):
        return self.queryset().filter(pk=pk).first()

    def any(self, pk) -> bool:
        return self.model.objects.filter(pk=pk).exists()

    def add(self, entity) -> None:
        self._uow.register(
            lambda: entity.save(force_insert=True),
            f"{self.model.__name__.lower()}.add",
        )

    def update(self, entity, expected_version: Optional[int] = None) -> None:
        """Queue a full update of ``entity``.

        With ``expected_version`` the write only applies while the stored
        stamp still matches; otherwise it only requires the row to exist.
        """

        model = self.model
        values = {name: getattr(entity, name) for name in self.updatable_fields}

        def _write():
            qs = model.objects.filter(pk=entity.pk)
            if expected_version is not None:
                qs = qs.filter(version=expected_version)
            if qs.update(version=F("version") + 1, **values) == 0:
                raise StaleWrite(model, entity.pk)

        self._uow.register(_write, f"{model.__name__.lower()}.update")

    def remove(self, entity) -> None:
        model = self.model

        def _delete():
            deleted, _ = model.objects.filter(pk=entity.pk).delete()
            if deleted == 0:
                raise StaleWrite(model, entity.pk)

        self._uow.register(_delete, f"{model.__name__.lower()}.remove")


class TournamentRepository(Repository):
    model = Tournament
    updatable_fields = ("title", "start_date")
    sort_fields = {
        "title": "title",
        "startdate": "start_date",
        "start_date": "start_date",
    }

    def _with_games(self, qs):
        return qs.prefetch_related(
            Prefetch("games", queryset=Game.objects.order_by("time", "pk"))
        )

    def get_all(self, sort_by: Optional[str] = None, include_games: bool = False) -> list:
        qs = self.queryset().order_by(*self.ordering(sort_by))
        if include_games:
            qs = self._with_games(qs)
        return list(qs)

    def get(self, pk, include_games: bool = False):
        qs = self.queryset().filter(pk=pk)
        if include_games:
            qs = self._with_games(qs)
        return qs.first()

    def remove(self, entity) -> None:
        """Deleting a tournament always deletes its games in the same commit."""

        def _delete():
            games, _ = Game.objects.filter(tournament_id=entity.pk).delete()
            deleted, _ = Tournament.objects.filter(pk=entity.pk).delete()
            if deleted == 0:
                raise StaleWrite(Tournament, entity.pk)
            logger.info("tournaments.remove id=%s games_removed=%s", entity.pk, games)

        self._uow.register(_delete, "tournament.remove")


class GameRepository(Repository):
    model = Game
    updatable_fields = ("title", "time", "tournament_id")
    sort_fields = {"title": "title", "time": "time"}

    def get_by_title(self, title: str) -> list:
        return list(self.queryset().filter(title__icontains=title).order_by("pk"))


class UnitOfWork:
    """Groups repository writes and commits them atomically."""

    def __init__(self, using: Optional[str] = None):
        self.using = using
        self._pending: List[Tuple[str, Callable[[], None]]] = []
        self.tournaments = TournamentRepository(self)
        self.games = GameRepository(self)

    def register(self, operation: Callable[[], None], label: str) -> None:
        self._pending.append((label, operation))

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def complete(self) -> Result:
        """Run every queued write in one transaction.

        Returns ``success`` with the number of writes, ``conflict`` when a
        version-checked update lost a race, ``invalid`` on integrity errors and
        ``failure`` for any other database error. The queue is always drained.
        """

        pending, self._pending = self._pending, []
        labels = [label for label, _ in pending]
        try:
            with transaction.atomic(using=self.using):
                for _, operation in pending:
                    operation()
        except StaleWrite as exc:
            logger.info("uow.conflict ops=%s model=%s pk=%s", labels, exc.model.__name__, exc.pk)
            return Result.conflict(str(exc))
        except IntegrityError as exc:
            logger.warning("uow.integrity ops=%s error=%s", labels, exc)
            return Result.invalid("The change violates a data integrity constraint.")
        except DatabaseError:
            logger.exception("uow.failure ops=%s", labels)
            return Result.failure("An error occurred while saving changes.")
        logger.debug("uow.commit ops=%s", labels)
        return Result.success(len(pending))
