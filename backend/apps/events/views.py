"""
Views for Events app: public event data, leaderboard, eligibility preview,
joining and host lifecycle actions.
"""

import logging

from apps.participants.serializers import JoinEventSerializer, ParticipantSerializer
from apps.participants.services import authorize_participant, join_event, reveals_access_token
from apps.votes.services import preview_eligibility
from core.throttles import EventJoinRateThrottle
from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import services
from .leaderboard import get_leaderboard
from .models import Event, EventState
from .permissions import IsEventHostOrReadOnly
from .serializers import (
    EligibilityQuerySerializer,
    EventSerializer,
    LeaderboardSerializer,
    OpenVotingSerializer,
)

logger = logging.getLogger(__name__)


class EventViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for events.

    Endpoints:
    - GET  /api/v1/events/ - List visible events
    - GET  /api/v1/events/{id}/ - Event details
    - GET  /api/v1/events/{id}/leaderboard/ - Leaderboard (masked until revealed)
    - GET  /api/v1/events/{id}/eligibility/ - Eligibility preview for a participant
    - POST /api/v1/events/{id}/join/ - Join as a participant
    - POST /api/v1/events/{id}/publish/ | open/ | close/ | publish-results/ | archive/ | cancel/
      - Host lifecycle actions
    """

    serializer_class = EventSerializer
    permission_classes = [IsEventHostOrReadOnly]

    def get_queryset(self):
        """Drafts are only visible to their host."""
        queryset = Event.objects.prefetch_related("options")
        user = self.request.user
        if user and user.is_authenticated:
            return queryset.filter(Q(host=user) | ~Q(state=EventState.DRAFT))
        return queryset.exclude(state=EventState.DRAFT)

    def get_throttles(self):
        if self.action == "join":
            return [EventJoinRateThrottle()]
        return super().get_throttles()

    @extend_schema(responses=LeaderboardSerializer)
    @action(detail=True, methods=["get"])
    def leaderboard(self, request, pk=None):
        """
        GET /api/v1/events/{id}/leaderboard/

        Counts are masked and options unranked until the event is revealed.
        """
        event = self.get_object()
        return Response(get_leaderboard(event.pk))

    @extend_schema(parameters=[EligibilityQuerySerializer])
    @action(detail=True, methods=["get"])
    def eligibility(self, request, pk=None):
        """
        GET /api/v1/events/{id}/eligibility/?participant_id=7&option_id=3

        Non-locking preview; the vote itself re-checks.
        """
        event = self.get_object()
        query = EligibilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        participant = authorize_participant(
            query.validated_data["participant_id"],
            user=request.user,
            access_token=request.META.get("HTTP_X_PARTICIPANT_TOKEN"),
        )
        decision = preview_eligibility(event.pk, participant.pk, query.validated_data["option_id"])
        return Response(decision.as_dict())

    @extend_schema(request=JoinEventSerializer, responses={201: ParticipantSerializer, 200: ParticipantSerializer})
    @action(detail=True, methods=["post"], permission_classes=[])
    def join(self, request, pk=None):
        """
        POST /api/v1/events/{id}/join/

        Authenticated callers join with their account unless they send a
        phone number or anonymous token. Joining twice returns the same
        participant with 200 OK; a repeated phone-number join omits
        the access token.
        """
        event = self.get_object()
        serializer = JoinEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        phone_number = data.get("phone_number") or None
        anonymous_token = data.get("anonymous_token") or None
        account = None
        if not phone_number and not anonymous_token and request.user.is_authenticated:
            account = request.user

        participant, created = join_event(
            event.pk,
            account=account,
            phone_number=phone_number,
            anonymous_token=anonymous_token,
            registration_method=data.get("registration_method"),
        )
        data = ParticipantSerializer(
            participant, context={"include_access_token": reveals_access_token(participant, created)}
        ).data
        data["created"] = created
        return Response(data, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)

    def _host_action(self, operation, **kwargs):
        event = self.get_object()
        event = operation(event.pk, **kwargs)
        logger.info(f"Host {self.request.user.pk} ran {operation.__name__} on event {event.pk}")
        return Response(EventSerializer(event).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"])
    def publish(self, request, pk=None):
        return self._host_action(services.publish_event)

    @extend_schema(request=OpenVotingSerializer)
    @action(detail=True, methods=["post"], url_path="open", url_name="open")
    def open_voting(self, request, pk=None):
        window = OpenVotingSerializer(data=request.data)
        window.is_valid(raise_exception=True)
        return self._host_action(
            services.open_voting,
            starts_at=window.validated_data.get("voting_starts_at"),
            ends_at=window.validated_data.get("voting_ends_at"),
        )

    @action(detail=True, methods=["post"], url_path="close", url_name="close")
    def close_voting(self, request, pk=None):
        return self._host_action(services.close_voting)

    @action(detail=True, methods=["post"], url_path="publish-results", url_name="publish-results")
    def publish_results(self, request, pk=None):
        return self._host_action(services.publish_results)

    @action(detail=True, methods=["post"])
    def archive(self, request, pk=None):
        return self._host_action(services.archive_event)

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        return self._host_action(services.cancel_event)
