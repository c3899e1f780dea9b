"""
Views for Votes app.
"""

import logging

from apps.participants.services import authorize_participant
from core.throttles import VoteCastRateThrottle
from core.utils.helpers import extract_ip_address
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .serializers import VoteCastSerializer, VoteResultSerializer
from .services import cast_vote

logger = logging.getLogger(__name__)

PARTICIPANT_TOKEN_HEADER = "HTTP_X_PARTICIPANT_TOKEN"


class VoteViewSet(viewsets.GenericViewSet):
    """
    Vote-cast endpoint.

    Endpoints:
    - POST /api/v1/votes/cast/ - Cast a vote
    """

    permission_classes = [AllowAny]
    serializer_class = VoteCastSerializer

    def get_throttles(self):
        """Return throttles based on action."""
        if self.action == "cast":
            return [VoteCastRateThrottle()]
        return []

    @extend_schema(request=VoteCastSerializer, responses={201: VoteResultSerializer, 200: VoteResultSerializer})
    @action(detail=False, methods=["post"], url_path="cast")
    def cast(self, request):
        """
        Cast a vote in an event.

        POST /api/v1/votes/cast/

        Request Body:
        {
            "event_id": 1,
            "participant_id": 7,
            "option_id": 3,
            "client_request_token": "optional-token"
        }

        The caller must be the participant's account or send the
        participant's access token in the X-Participant-Token header.

        Returns:
        - 201 Created: New vote recorded
        - 200 OK: Idempotent retry (original result returned)
        - 400 Bad Request: Malformed input
        - 404 Not Found: Event, participant or option not found
        - 409 Conflict: Not votable, limit reached, duplicate vote, option inactive
        - 429 Too Many Requests: Rate limit exceeded
        - 503 Service Unavailable: Lock contention, safe to retry
        """
        serializer = VoteCastSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        authorize_participant(
            data["participant_id"],
            user=request.user,
            access_token=request.META.get(PARTICIPANT_TOKEN_HEADER),
        )

        result = cast_vote(
            event_id=data["event_id"],
            participant_id=data["participant_id"],
            option_id=data["option_id"],
            client_request_token=data.get("client_request_token"),
            origin=data.get("origin") or "api",
            client_info=data.get("client_info") or {},
            ip_address=extract_ip_address(request),
            user_agent=request.META.get("HTTP_USER_AGENT", ""),
        )

        return Response(
            VoteResultSerializer(result).data,
            status=status.HTTP_200_OK if result.replayed else status.HTTP_201_CREATED,
        )
