from django.contrib import admin

from .models import Game, Tournament


class GameInline(admin.TabularInline):
    model = Game
    extra = 0
    fields = ("title", "time")


@admin.register(Tournament)
class TournamentAdmin(admin.ModelAdmin):
    list_display = ("title", "start_date", "version")
    search_fields = ("title",)
    readonly_fields = ("version",)
    inlines = [GameInline]


@admin.register(Game)
class GameAdmin(admin.ModelAdmin):
    list_display = ("title", "time", "tournament", "version")
    list_filter = ("tournament",)
    search_fields = ("title",)
    readonly_fields = ("version",)
