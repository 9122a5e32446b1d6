"""Data models for the tournaments app."""

from django.db import models


class Tournament(models.Model):
    title = models.CharField(max_length=100)
    start_date = models.DateTimeField()
    # optimistic concurrency stamp, bumped on every update
    version = models.PositiveIntegerField(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title


class Game(models.Model):
    title = models.CharField(max_length=100, db_index=True)
    time = models.DateTimeField()
    version = models.PositiveIntegerField(default=1)
    tournament = models.ForeignKey(
        Tournament, on_delete=models.CASCADE, related_name="games"
    )

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title
