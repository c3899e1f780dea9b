"""
Factory Boy factories for Participants models.
"""

import factory

from apps.events.factories import EventFactory
from core.utils.helpers import generate_access_token

from .models import Participant, RegistrationMethod


class ParticipantFactory(factory.django.DjangoModelFactory):
    """Factory for an anonymous participant whose allowance follows the event."""

    class Meta:
        model = Participant

    event = factory.SubFactory(EventFactory)
    anonymous_token = factory.Faker("uuid4")
    registration_method = RegistrationMethod.ANONYMOUS
    access_token = factory.LazyFunction(generate_access_token)
    max_votes = factory.LazyAttribute(lambda o: o.event.votes_per_participant)
    config_version = factory.LazyAttribute(lambda o: o.event.config_version)
