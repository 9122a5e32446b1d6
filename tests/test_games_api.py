import datetime

import pytest
from django.db import DatabaseError

from tests.factories import make_game, make_tournament
from tournaments.models import Game
from tournaments.repositories import GameRepository, UnitOfWork
from tournaments.results import Result

pytestmark = pytest.mark.django_db

UTC = datetime.timezone.utc


def test_create_get_patch_roundtrip(client):
    tournament = make_tournament()
    resp = client.post(
        "/api/Games",
        {"title": "Final", "time": "2024-06-01T18:00", "tournament_id": tournament.id},
        content_type="application/json",
    )
    assert resp.status_code == 201
    game_id = resp.json()["id"]
    assert resp["Location"].endswith(f"/api/Games/{game_id}")

    detail = client.get(f"/api/Games/{game_id}")
    assert detail.status_code == 200
    data = detail.json()
    assert data["title"] == "Final"
    assert data["time"] == "2024-06-01T18:00:00Z"
    assert data["tournament_id"] == tournament.id

    patched = client.patch(
        f"/api/Games/{game_id}",
        [{"op": "replace", "path": "/title", "value": "Championship"}],
        content_type="application/json",
    )
    assert patched.status_code == 204
    after = client.get(f"/api/Games/{game_id}").json()
    assert after["title"] == "Championship"
    assert after["time"] == data["time"]
    assert after["version"] == data["version"] + 1


def test_create_requires_tournament(client):
    resp = client.post(
        "/api/Games",
        {"title": "Final", "time": "2024-06-01T18:00"},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert "tournament_id" in resp.json()


@pytest.mark.django_db(transaction=True)
def test_create_with_unknown_tournament_is_rejected(client):
    resp = client.post(
        "/api/Games",
        {"title": "Final", "time": "2024-06-01T18:00", "tournament_id": 12345},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert not Game.objects.exists()


def test_list_empty_is_not_found(client):
    resp = client.get("/api/Games")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No games found."


def test_sort_by_title_is_non_decreasing(client):
    tournament = make_tournament()
    for title in ["Semifinal", "Final", "Quarterfinal", "Final"]:
        make_game(title, tournament=tournament)

    titles = [g["title"] for g in client.get("/api/Games?sortBy=title").json()]
    assert titles == sorted(titles)

    shouted = [g["title"] for g in client.get("/api/Games?sortBy=TITLE").json()]
    assert shouted == titles


def test_unknown_sort_key_keeps_insertion_order(client):
    tournament = make_tournament()
    created = [make_game(t, tournament=tournament).id for t in ["C", "A", "B"]]

    plain = [g["id"] for g in client.get("/api/Games").json()]
    unknown = [g["id"] for g in client.get("/api/Games?sortBy=score").json()]
    assert plain == created
    assert unknown == created


def test_sort_by_time(client):
    tournament = make_tournament()
    late = make_game("Late", tournament, datetime.datetime(2025, 6, 3, tzinfo=UTC))
    early = make_game("Early", tournament, datetime.datetime(2025, 6, 1, tzinfo=UTC))

    ids = [g["id"] for g in client.get("/api/Games", {"sortBy": "time"}).json()]
    assert ids == [early.id, late.id]


def test_search_by_title(client):
    tournament = make_tournament()
    make_game("Grand Finale", tournament)
    make_game("Semifinal", tournament)
    make_game("Opener", tournament)

    resp = client.get("/api/Games/search", {"title": "FINAL"})
    assert resp.status_code == 200
    assert sorted(g["title"] for g in resp.json()) == ["Grand Finale", "Semifinal"]

    assert client.get("/api/Games/search", {"title": "  "}).status_code == 400
    assert client.get("/api/Games/search").status_code == 400

    missing = client.get("/api/Games/search", {"title": "Bronze"})
    assert missing.status_code == 404
    assert missing.json()["detail"] == "No games found with the title 'Bronze'."


def test_put_can_move_game_between_tournaments(client):
    game = make_game()
    target = make_tournament("Other")
    resp = client.put(
        f"/api/Games/{game.id}",
        {
            "id": game.id,
            "title": "Moved",
            "time": "2025-06-05T12:00:00Z",
            "tournament_id": target.id,
        },
        content_type="application/json",
    )
    assert resp.status_code == 204
    game.refresh_from_db()
    assert game.tournament_id == target.id
    assert game.title == "Moved"


def test_put_id_mismatch(client):
    game = make_game()
    resp = client.put(
        f"/api/Games/{game.id}",
        {"title": "X", "time": "2025-06-05T12:00:00Z", "tournament_id": game.tournament_id},
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "The ID in the URL does not match the ID in the body."


def test_patch_remove_required_field_is_unprocessable(client):
    game = make_game("Final")
    resp = client.patch(
        f"/api/Games/{game.id}",
        [{"op": "remove", "path": "/time"}],
        content_type="application/json",
    )
    assert resp.status_code == 422
    assert "time" in resp.json()["errors"]
    game.refresh_from_db()
    assert game.title == "Final"


def test_patch_failed_test_operation_aborts(client):
    game = make_game("Final")
    resp = client.patch(
        f"/api/Games/{game.id}",
        [
            {"op": "replace", "path": "/title", "value": "Changed"},
            {"op": "test", "path": "/title", "value": "Final"},
        ],
        content_type="application/json",
    )
    assert resp.status_code == 422
    assert resp.json()["errors"]["operation"] == 1
    game.refresh_from_db()
    assert game.title == "Final"


def test_patch_without_document(client):
    game = make_game()
    resp = client.patch(f"/api/Games/{game.id}", {}, content_type="application/json")
    assert resp.status_code == 400


def test_delete_twice(client):
    game = make_game()
    assert client.delete(f"/api/Games/{game.id}").status_code == 204
    second = client.delete(f"/api/Games/{game.id}")
    assert second.status_code == 404
    assert second.json()["detail"] == f"Game with ID {game.id} not found."
    assert client.delete("/api/Games/9999").status_code == 404


def test_empty_patch_document_is_a_no_op(client):
    game = make_game("Final")
    resp = client.patch(f"/api/Games/{game.id}", [], content_type="application/json")
    assert resp.status_code == 204
    game.refresh_from_db()
    assert game.title == "Final"

    assert client.patch("/api/Games/9999", [], content_type="application/json").status_code == 404


def test_put_rejects_fractional_body_id(client):
    game = make_game()
    resp = client.put(
        f"/api/Games/{game.id}",
        {
            "id": game.id + 0.5,
            "title": "X",
            "time": "2025-06-05T12:00:00Z",
            "tournament_id": game.tournament_id,
        },
        content_type="application/json",
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "The ID in the URL does not match the ID in the body."

    whole = client.put(
        f"/api/Games/{game.id}",
        {
            "id": float(game.id),
            "title": "X",
            "time": "2025-06-05T12:00:00Z",
            "tournament_id": game.tournament_id,
        },
        content_type="application/json",
    )
    assert whole.status_code == 204


def test_delete_of_row_removed_concurrently_is_not_found(client, monkeypatch):
    game = make_game()
    original_get = GameRepository.get

    def get_then_lose_row(self, pk):
        entity = original_get(self, pk)
        Game.objects.filter(pk=pk).delete()
        return entity

    monkeypatch.setattr(GameRepository, "get", get_then_lose_row)
    resp = client.delete(f"/api/Games/{game.id}")
    assert resp.status_code == 404
    assert resp.json()["detail"] == f"Game with ID {game.id} not found."


def test_store_error_on_read_is_a_generic_server_error(client, monkeypatch):
    def broken(self, sort_by=None):
        raise DatabaseError("secret table xyz")

    monkeypatch.setattr(GameRepository, "get_all", broken)
    resp = client.get("/api/Games")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "An unexpected error occurred."}
    assert b"secret" not in resp.content


def test_failed_commit_on_create_is_a_server_error(client, monkeypatch):
    tournament = make_tournament()
    monkeypatch.setattr(
        UnitOfWork, "complete", lambda self: Result.failure("disk I/O error on games")
    )
    resp = client.post(
        "/api/Games",
        {"title": "Final", "time": "2024-06-01T18:00", "tournament_id": tournament.id},
        content_type="application/json",
    )
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Failed to save game to the database."}
