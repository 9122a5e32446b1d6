from __future__ import annotations

import logging

from django.urls import reverse
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from tournaments import conf
from tournaments.mappings import GameMapper, TournamentMapper
from tournaments.repositories import UnitOfWork
from tournaments.results import Outcome, Result
from tournaments.services.patching import patch_entity

logger = logging.getLogger(__name__)

TRUE_VALUES = {"1", "true", "yes"}

ERROR_STATUS = {
    Outcome.INVALID: status.HTTP_400_BAD_REQUEST,
    Outcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    Outcome.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    Outcome.CONFLICT: status.HTTP_409_CONFLICT,
    Outcome.FAILURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(result: Result, failure_detail: str | None = None) -> Response:
    if result.outcome is Outcome.VALIDATION_FAILED:
        return Response(
            {"detail": result.detail, "errors": result.errors},
            status=ERROR_STATUS[result.outcome],
        )
    detail = result.detail
    if result.outcome is Outcome.FAILURE and failure_detail:
        detail = failure_detail
    payload = {"detail": detail}
    if result.errors is not None:
        payload["errors"] = result.errors
    return Response(payload, status=ERROR_STATUS[result.outcome])


def _flag(request, name: str) -> bool:
    return (request.query_params.get(name) or "").strip().lower() in TRUE_VALUES


def _same_id(body_id, pk: int) -> bool:
    if isinstance(body_id, bool):
        return False
    if isinstance(body_id, float) and not body_id.is_integer():
        return False
    try:
        return int(body_id) == pk
    except (TypeError, ValueError):
        return False


class EntityAPIView(APIView):
    """Shared plumbing for the tournament and game endpoints.

    ``unit_of_work_class`` and ``mapper`` are explicit collaborators; override
    them through ``as_view(...)`` to swap either one.
    """

    permission_classes = [permissions.AllowAny]
    unit_of_work_class = UnitOfWork
    mapper = None
    repository_name = ""
    detail_url_name = ""
    plural = ""

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.unit_of_work = self.unit_of_work_class()

    @property
    def repository(self):
        return getattr(self.unit_of_work, self.repository_name)

    @property
    def label(self) -> str:
        return self.mapper.label

    def to_dto(self, entity) -> dict:
        return self.mapper.to_dto(entity)

    def render(self, entities, many: bool = False):
        if many:
            dtos = [self.to_dto(e) for e in entities]
        else:
            dtos = self.to_dto(entities)
        return self.mapper.serializer_class(dtos, many=many).data

    def render_list(self, entities, empty_detail: str) -> Response:
        if not entities and conf.EMPTY_LIST_IS_NOT_FOUND:
            return Response({"detail": empty_detail}, status=status.HTTP_404_NOT_FOUND)
        return Response(self.render(entities, many=True))

    def not_found(self, pk) -> Response:
        return Response(
            {"detail": f"{self.label} with ID {pk} not found."},
            status=status.HTTP_404_NOT_FOUND,
        )

    def fetch(self, pk):
        return self.repository.get(pk)


class EntityListView(EntityAPIView):
    def post(self, request):
        serializer = self.mapper.serializer_class(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        entity = self.mapper.to_entity(serializer.validated_data)
        self.repository.add(entity)
        result = self.unit_of_work.complete()
        if not result.succeeded:
            return error_response(
                result, f"Failed to save {self.label.lower()} to the database."
            )
        logger.info("%s.create id=%s", self.plural, entity.pk)
        location = request.build_absolute_uri(
            reverse(self.detail_url_name, args=[entity.pk])
        )
        return Response(
            self.render(entity),
            status=status.HTTP_201_CREATED,
            headers={"Location": location},
        )


class EntityDetailView(EntityAPIView):
    def get(self, request, pk: int):
        entity = self.fetch(pk)
        if entity is None:
            return self.not_found(pk)
        return Response(self.render(entity))

    def put(self, request, pk: int):
        body = request.data if isinstance(request.data, dict) else {}
        if not _same_id(body.get("id"), pk):
            return Response(
                {"detail": "The ID in the URL does not match the ID in the body."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        serializer = self.mapper.serializer_class(data=body)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        entity = self.mapper.to_entity(data, pk=pk)
        self.repository.update(entity, expected_version=data.get("version"))
        result = self.unit_of_work.complete()
        if result.outcome is Outcome.CONFLICT:
            if not self.repository.any(pk):
                return Response(
                    {"detail": f"{self.label} with ID {pk} does not exist."},
                    status=status.HTTP_404_NOT_FOUND,
                )
            return Response(
                {"detail": f"{self.label} with ID {pk} was modified by another request."},
                status=status.HTTP_409_CONFLICT,
            )
        if not result.succeeded:
            return error_response(
                result, f"An error occurred while updating the {self.label.lower()}."
            )
        logger.info("%s.replace id=%s", self.plural, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    def patch(self, request, pk: int):
        result = patch_entity(
            self.unit_of_work, self.repository, self.mapper, pk, request.data
        )
        if not result.succeeded:
            return error_response(
                result, f"An error occurred while updating the {self.label.lower()}."
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    def delete(self, request, pk: int):
        entity = self.repository.get(pk)
        if entity is None:
            return self.not_found(pk)
        self.repository.remove(entity)
        result = self.unit_of_work.complete()
        if result.outcome is Outcome.CONFLICT:
            return self.not_found(pk)
        if not result.succeeded:
            return error_response(
                result, f"An error occurred while deleting the {self.label.lower()}."
            )
        logger.info("%s.delete id=%s", self.plural, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TournamentViewMixin:
    mapper = TournamentMapper()
    repository_name = "tournaments"
    detail_url_name = "tournament-detail"
    plural = "tournaments"

    def include_games(self) -> bool:
        return _flag(self.request, "includeGames")

    def to_dto(self, entity) -> dict:
        return self.mapper.to_dto(entity, include_games=self.include_games())


class TournamentList(TournamentViewMixin, EntityListView):
    def get(self, request):
        tournaments = self.repository.get_all(
            sort_by=request.query_params.get("sortBy"),
            include_games=self.include_games(),
        )
        return self.render_list(tournaments, "No tournaments found.")


class TournamentDetail(TournamentViewMixin, EntityDetailView):
    def fetch(self, pk):
        return self.repository.get(pk, include_games=self.include_games())


class GameViewMixin:
    mapper = GameMapper()
    repository_name = "games"
    detail_url_name = "game-detail"
    plural = "games"


class GameList(GameViewMixin, EntityListView):
    def get(self, request):
        games = self.repository.get_all(sort_by=request.query_params.get("sortBy"))
        return self.render_list(games, "No games found.")


class GameDetail(GameViewMixin, EntityDetailView):
    pass


class GameSearch(GameViewMixin, EntityAPIView):
    def get(self, request):
        title = (request.query_params.get("title") or "").strip()
        if not title:
            return Response(
                {"detail": "You must provide a title to search."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        games = self.repository.get_by_title(title)
        if not games:
            return Response(
                {"detail": f"No games found with the title '{title}'."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(self.render(games, many=True))
