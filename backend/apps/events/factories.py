"""
Factory Boy factories for Events models.
"""

from datetime import timedelta

import factory
from django.contrib.auth.models import User
from django.utils import timezone

from .models import Event, EventState, Option


class UserFactory(factory.django.DjangoModelFactory):
    """Factory for host and voter accounts."""

    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    password = factory.django.Password("testpass123")


class EventFactory(factory.django.DjangoModelFactory):
    """Factory for Event model. Defaults to a draft."""

    class Meta:
        model = Event

    title = factory.Faker("sentence", nb_words=4)
    description = factory.Faker("paragraph")
    host = factory.SubFactory(UserFactory)
    state = EventState.DRAFT
    votes_per_participant = 1

    class Params:
        live = factory.Trait(
            state=EventState.LIVE,
            voting_starts_at=factory.LazyFunction(lambda: timezone.now() - timedelta(hours=1)),
            voting_ends_at=factory.LazyFunction(lambda: timezone.now() + timedelta(hours=1)),
            opened_at=factory.LazyFunction(timezone.now),
        )


class OptionFactory(factory.django.DjangoModelFactory):
    """Factory for Option model."""

    class Meta:
        model = Option

    event = factory.SubFactory(EventFactory)
    title = factory.Sequence(lambda n: f"Option {n}")
    display_order = factory.Sequence(lambda n: n)
