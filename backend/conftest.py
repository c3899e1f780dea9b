"""
Pytest configuration and fixtures for all tests.
This file makes fixtures available to all tests in backend/.
"""

import pytest
from apps.events.factories import EventFactory, OptionFactory, UserFactory
from apps.participants.factories import ParticipantFactory

# Ensure pytest-django is loaded
pytest_plugins = ["pytest_django"]


@pytest.fixture
def user(db):
    """Create a test user who hosts the fixture events."""
    return UserFactory(username="testuser", email="test@example.com")


@pytest.fixture
def other_user(db):
    return UserFactory(username="otheruser")


@pytest.fixture
def draft_event(db, user):
    """Create a draft event with two options."""
    event = EventFactory(host=user, title="Draft Event")
    OptionFactory(event=event, title="Alpha", display_order=0)
    OptionFactory(event=event, title="Beta", display_order=1)
    return event


@pytest.fixture
def live_event(db, user):
    """Create a live event allowing three votes per participant, with an open window."""
    return EventFactory(host=user, live=True, title="Live Event", votes_per_participant=3, total_options=3)


@pytest.fixture
def options(db, live_event):
    """Create three options for the live event."""
    return [
        OptionFactory(event=live_event, title="Alpha", display_order=0),
        OptionFactory(event=live_event, title="Beta", display_order=1),
        OptionFactory(event=live_event, title="Gamma", display_order=2),
    ]


@pytest.fixture
def participant(db, live_event):
    """Create a participant admitted into the live event."""
    return ParticipantFactory(event=live_event)


@pytest.fixture
def api_client():
    """Create a DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client(api_client, user):
    """Create an API client authenticated as the event host."""
    api_client.force_authenticate(user=user)
    return api_client
