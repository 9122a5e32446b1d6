from django.urls import path

from . import views

urlpatterns = [
    path("Tournaments", views.TournamentList.as_view(), name="tournament-list"),
    path(
        "Tournaments/<int:pk>",
        views.TournamentDetail.as_view(),
        name="tournament-detail",
    ),
    path("Games", views.GameList.as_view(), name="game-list"),
    path("Games/search", views.GameSearch.as_view(), name="game-search"),
    path("Games/<int:pk>", views.GameDetail.as_view(), name="game-detail"),
]
