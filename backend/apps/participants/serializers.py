"""
Serializers for Participants app.
"""

from rest_framework import serializers

from .models import Participant, RegistrationMethod


class JoinEventSerializer(serializers.Serializer):
    """Identity for joining an event. Authenticated callers join with their account."""

    phone_number = serializers.CharField(required=False, allow_blank=True, max_length=32)
    anonymous_token = serializers.CharField(required=False, allow_blank=True, max_length=128)
    registration_method = serializers.ChoiceField(choices=RegistrationMethod.choices, required=False)


class ParticipantSerializer(serializers.ModelSerializer):
    """Participant as returned to the participant themself after joining."""

    participant_id = serializers.IntegerField(source="id", read_only=True)
    remaining_votes = serializers.IntegerField(read_only=True)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not self.context.get("include_access_token", False):
            data.pop("access_token")
        return data

    class Meta:
        model = Participant
        fields = [
            "participant_id",
            "event",
            "registration_method",
            "access_token",
            "max_votes",
            "votes_used",
            "remaining_votes",
            "config_version",
            "joined_at",
        ]
        read_only_fields = fields
