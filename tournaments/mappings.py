"""Field-by-field conversion between models and their DTO shapes.

DTOs here are plain dicts holding Python values (datetimes stay datetimes);
the serializers in :mod:`tournaments.api.serializers` turn them into wire JSON
and validate incoming payloads back into the same shape.
"""

from __future__ import annotations

from .api.serializers import (
    GameSerializer,
    GameUpdateSerializer,
    TournamentSerializer,
    TournamentUpdateSerializer,
)
from .models import Game, Tournament


class GameMapper:
    serializer_class = GameSerializer
    update_serializer_class = GameUpdateSerializer
    label = "Game"

    def to_dto(self, game: Game) -> dict:
        return {
            "id": game.id,
            "title": game.title,
            "time": game.time,
            "tournament_id": game.tournament_id,
            "version": game.version,
        }

    def to_entity(self, data: dict, pk=None) -> Game:
        return Game(
            id=pk,
            title=data["title"],
            time=data["time"],
            tournament_id=data["tournament_id"],
        )

    def to_update_view(self, game: Game) -> dict:
        return {"title": game.title, "time": game.time}

    def apply_update(self, data: dict, game: Game) -> Game:
        game.title = data["title"]
        game.time = data["time"]
        return game


class TournamentMapper:
    serializer_class = TournamentSerializer
    update_serializer_class = TournamentUpdateSerializer
    label = "Tournament"

    def __init__(self, game_mapper: GameMapper | None = None):
        self.game_mapper = game_mapper or GameMapper()

    def to_dto(self, tournament: Tournament, include_games: bool = False) -> dict:
        dto = {
            "id": tournament.id,
            "title": tournament.title,
            "start_date": tournament.start_date,
            "version": tournament.version,
        }
        if include_games:
            dto["games"] = [self.game_mapper.to_dto(g) for g in tournament.games.all()]
        return dto

    def to_entity(self, data: dict, pk=None) -> Tournament:
        return Tournament(id=pk, title=data["title"], start_date=data["start_date"])

    def to_update_view(self, tournament: Tournament) -> dict:
        return {"title": tournament.title, "start_date": tournament.start_date}

    def apply_update(self, data: dict, tournament: Tournament) -> Tournament:
        tournament.title = data["title"]
        tournament.start_date = data["start_date"]
        return tournament
