"""
Tests for the participant registry.
"""

import pytest
from apps.events import services as event_services
from apps.events.factories import EventFactory, UserFactory
from apps.events.models import EventState
from apps.participants.models import Participant, RegistrationMethod
from apps.participants.services import authorize_participant, join_event, resolve_identity, reveals_access_token
from core.exceptions import EventNotFoundError, EventNotJoinableError, ParticipantNotFoundError, ValidationError


@pytest.mark.django_db
class TestJoinEvent:
    def test_join_with_phone_number(self, live_event):
        participant, created = join_event(live_event.pk, phone_number="0044 (20) 7946-0000")

        assert created is True
        assert participant.phone_number == "+442079460000"
        assert participant.registration_method == RegistrationMethod.PHONE
        assert participant.max_votes == live_event.votes_per_participant
        assert participant.votes_used == 0
        assert participant.config_version == live_event.config_version

    def test_join_is_idempotent_per_identity(self, live_event):
        first, created_first = join_event(live_event.pk, anonymous_token="abc")
        second, created_second = join_event(live_event.pk, anonymous_token="abc")

        assert created_first is True
        assert created_second is False
        assert first.pk == second.pk
        assert first.access_token == second.access_token

    def test_same_identity_joins_different_events(self, live_event, user):
        other = EventFactory(host=user, live=True)

        first, _ = join_event(live_event.pk, account=user)
        second, _ = join_event(other.pk, account=user)

        assert first.pk != second.pk

    def test_join_published_event(self, draft_event):
        event_services.publish_event(draft_event.pk)
        participant, created = join_event(draft_event.pk, anonymous_token="early-bird")
        assert created

    @pytest.mark.parametrize(
        "state",
        [EventState.DRAFT, EventState.VOTING_CLOSED, EventState.RESULTS_PUBLISHED, EventState.CANCELLED],
    )
    def test_join_rejected_outside_joinable_states(self, user, state):
        event = EventFactory(host=user, state=state)
        with pytest.raises(EventNotJoinableError):
            join_event(event.pk, anonymous_token="late")
        assert not Participant.objects.filter(event=event).exists()

    def test_join_unknown_event(self, db):
        with pytest.raises(EventNotFoundError):
            join_event(999999, anonymous_token="x")

    def test_allowance_frozen_at_join(self, draft_event):
        event_services.publish_event(draft_event.pk)
        participant, _ = join_event(draft_event.pk, anonymous_token="first")

        event_services.update_event_config(draft_event.pk, votes_per_participant=5)
        later, _ = join_event(draft_event.pk, anonymous_token="second")

        participant.refresh_from_db()
        assert participant.max_votes == 1
        assert participant.config_version == 1
        assert later.max_votes == 5
        assert later.config_version == 2

    def test_invite_registration_method(self, live_event):
        participant, _ = join_event(
            live_event.pk, phone_number="+15550100100", registration_method=RegistrationMethod.INVITE
        )
        assert participant.registration_method == RegistrationMethod.INVITE

    def test_unknown_registration_method(self, live_event):
        with pytest.raises(ValidationError):
            join_event(live_event.pk, anonymous_token="x", registration_method="carrier-pigeon")


@pytest.mark.django_db
class TestResolveIdentity:
    def test_requires_exactly_one_identity(self, user):
        with pytest.raises(ValidationError):
            resolve_identity()
        with pytest.raises(ValidationError):
            resolve_identity(account=user, anonymous_token="abc")

    def test_blank_anonymous_token_counts_as_missing(self):
        with pytest.raises(ValidationError):
            resolve_identity(anonymous_token="   ")

    def test_rejects_overlong_anonymous_token(self):
        with pytest.raises(ValidationError):
            resolve_identity(anonymous_token="x" * 129)

    def test_rejects_malformed_phone_number(self):
        with pytest.raises(ValidationError):
            resolve_identity(phone_number="call me")


@pytest.mark.django_db
class TestRevealsAccessToken:
    def test_new_participants_get_their_token(self, live_event):
        participant, created = join_event(live_event.pk, phone_number="+15550100100")
        assert reveals_access_token(participant, created) is True

    def test_phone_rejoin_does_not_reveal_token(self, live_event):
        join_event(live_event.pk, phone_number="+15550100100")
        participant, created = join_event(live_event.pk, phone_number="+1 555 010 0100")

        assert created is False
        assert reveals_access_token(participant, created) is False

    def test_credential_rejoins_reveal_token(self, live_event, user):
        join_event(live_event.pk, anonymous_token="guest-1")
        join_event(live_event.pk, account=user)

        anonymous, anonymous_created = join_event(live_event.pk, anonymous_token="guest-1")
        account, account_created = join_event(live_event.pk, account=user)

        assert reveals_access_token(anonymous, anonymous_created) is True
        assert reveals_access_token(account, account_created) is True


@pytest.mark.django_db
class TestAuthorizeParticipant:
    def test_access_token_authorizes(self, participant):
        assert authorize_participant(participant.pk, access_token=participant.access_token) == participant

    def test_account_authorizes(self, live_event, user):
        participant, _ = join_event(live_event.pk, account=user)
        assert authorize_participant(participant.pk, user=user) == participant

    def test_other_account_is_rejected(self, live_event, user):
        participant, _ = join_event(live_event.pk, account=user)
        with pytest.raises(ParticipantNotFoundError):
            authorize_participant(participant.pk, user=UserFactory())

    def test_wrong_token_looks_like_missing_participant(self, participant):
        with pytest.raises(ParticipantNotFoundError) as wrong:
            authorize_participant(participant.pk, access_token="not-the-token")
        with pytest.raises(ParticipantNotFoundError) as missing:
            authorize_participant(999999, access_token="not-the-token")
        assert wrong.value.status_code == missing.value.status_code == 404
