"""
Serializers for Events app.
"""

from rest_framework import serializers

from .models import Event, Option


class OptionSerializer(serializers.ModelSerializer):
    """Public option fields. Counts are only exposed through the leaderboard."""

    class Meta:
        model = Option
        fields = ["id", "title", "description", "display_order", "is_active", "created_at"]
        read_only_fields = fields


class EventSerializer(serializers.ModelSerializer):
    """Public event fields, without counters."""

    options = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id",
            "public_id",
            "join_code",
            "title",
            "description",
            "state",
            "voting_starts_at",
            "voting_ends_at",
            "votes_per_participant",
            "allow_multiple_votes_per_option",
            "tiebreaker",
            "reveal_policy",
            "config_version",
            "options",
            "created_at",
        ]
        read_only_fields = fields

    def get_options(self, obj):
        return OptionSerializer(obj.options.filter(is_active=True), many=True).data


class OpenVotingSerializer(serializers.Serializer):
    """Optional voting window supplied when opening an event."""

    voting_starts_at = serializers.DateTimeField(required=False, allow_null=True)
    voting_ends_at = serializers.DateTimeField(required=False, allow_null=True)


class EligibilityQuerySerializer(serializers.Serializer):
    participant_id = serializers.IntegerField(min_value=1)
    option_id = serializers.IntegerField(min_value=1)


class LeaderboardOptionSerializer(serializers.Serializer):
    option_id = serializers.IntegerField()
    title = serializers.CharField()
    # An integer once revealed, the mask placeholder before
    vote_count = serializers.JSONField()
    rank = serializers.IntegerField(required=False)


class LeaderboardSerializer(serializers.Serializer):
    event_id = serializers.IntegerField()
    state = serializers.CharField()
    revealed = serializers.BooleanField()
    options = LeaderboardOptionSerializer(many=True)
    event_totals = serializers.DictField()
