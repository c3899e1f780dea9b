"""
Serializers for Votes app.
"""

from rest_framework import serializers


class VoteCastSerializer(serializers.Serializer):
    """Serializer for casting a vote."""

    event_id = serializers.IntegerField(required=True, min_value=1, help_text="ID of the event to vote in")
    participant_id = serializers.IntegerField(required=True, min_value=1, help_text="ID of the voting participant")
    option_id = serializers.IntegerField(required=True, min_value=1, help_text="ID of the option to vote for")
    client_request_token = serializers.CharField(
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=128,
        help_text="Optional token making retries of this request safe",
    )
    origin = serializers.CharField(required=False, allow_blank=True, max_length=32, default="api")
    client_info = serializers.DictField(required=False, default=dict)


class VoteResultSerializer(serializers.Serializer):
    """Response body of a vote-cast request."""

    vote_id = serializers.IntegerField()
    event_id = serializers.IntegerField()
    participant_id = serializers.IntegerField()
    option_id = serializers.IntegerField()
    sequence_number = serializers.IntegerField()
    remaining_votes = serializers.IntegerField()
    event_totals = serializers.DictField(child=serializers.IntegerField())
    replayed = serializers.BooleanField()
