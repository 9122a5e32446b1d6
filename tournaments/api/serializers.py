from __future__ import annotations

from rest_framework import serializers

TITLE_MAX_LENGTH = 100


class GameUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=TITLE_MAX_LENGTH)
    time = serializers.DateTimeField()


class GameSerializer(GameUpdateSerializer):
    id = serializers.IntegerField(required=False, min_value=1)
    tournament_id = serializers.IntegerField(min_value=1)
    version = serializers.IntegerField(required=False, min_value=1)


class TournamentUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=TITLE_MAX_LENGTH)
    start_date = serializers.DateTimeField()


class TournamentSerializer(TournamentUpdateSerializer):
    id = serializers.IntegerField(required=False, min_value=1)
    version = serializers.IntegerField(required=False, min_value=1)
    games = GameSerializer(many=True, read_only=True)
