from rest_framework import serializers

from analytics.features import DEFAULT_LEVEL_RATING
from analytics.simulator import DEFAULT_MAX_TIME, DEFAULT_MIN_TIME, DEFAULT_TIMES_PER_PLAYER


class LevelStatsSerializer(serializers.Serializer):
    """Aggregate level stats, i.e. the scoring engine input."""

    top_times = serializers.ListField(
        child=serializers.FloatField(min_value=0.0), allow_empty=True, default=list
    )
    personal_bests = serializers.IntegerField(min_value=0)
    total_records = serializers.IntegerField(min_value=0)
    level_rating = serializers.FloatField(default=DEFAULT_LEVEL_RATING)

    def validate_top_times(self, value):
        if list(value) != sorted(value):
            raise serializers.ValidationError("top_times must be sorted ascending (index 0 = world record).")
        return value


class PlayerSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    times = serializers.ListField(
        child=serializers.FloatField(min_value=0.0, allow_null=False), allow_empty=True, default=list
    )


class PlayersSerializer(serializers.Serializer):
    players = PlayerSerializer(many=True)
    level_rating = serializers.FloatField(default=DEFAULT_LEVEL_RATING)


class UploadSerializer(serializers.Serializer):
    file = serializers.FileField()
    level_rating = serializers.FloatField(default=DEFAULT_LEVEL_RATING)


class SimulateSerializer(serializers.Serializer):
    players = serializers.IntegerField(min_value=0, max_value=1000, default=10)
    times = serializers.IntegerField(min_value=0, max_value=1000, default=DEFAULT_TIMES_PER_PLAYER)
    min_time = serializers.FloatField(min_value=0.0, default=DEFAULT_MIN_TIME)
    max_time = serializers.FloatField(min_value=0.0, default=DEFAULT_MAX_TIME)
    seed = serializers.IntegerField(min_value=0, allow_null=True, default=None)
    level_rating = serializers.FloatField(default=DEFAULT_LEVEL_RATING)

    def validate(self, attrs):
        if attrs["min_time"] >= attrs["max_time"]:
            raise serializers.ValidationError("min_time must be lower than max_time.")
        return attrs
