import datetime

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from core.models import Aircraft, AircraftSubscription
from maintenance.models import Issue
from reservations.models import Reservation

User = get_user_model()

BASE_TIME = datetime.datetime(2030, 5, 1, 9, 0, tzinfo=datetime.timezone.utc)


def hours(n):
    return BASE_TIME + datetime.timedelta(hours=n)


@pytest.fixture(autouse=True)
def sync_notifications(settings):
    settings.RESERVATION_NOTIFICATIONS_ASYNC = False
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin', password='pw', email='admin@test.com', privileges='admin'
    )


@pytest.fixture
def superuser(db):
    return User.objects.create_superuser(
        username='root', password='pw', email='root@test.com'
    )


@pytest.fixture
def maintainer_user(db):
    return User.objects.create_user(
        username='mechanic', password='pw', email='mechanic@test.com', privileges='maintainer'
    )


@pytest.fixture
def owner_user(db):
    return User.objects.create_user(
        username='owner', password='pw', email='owner@test.com', privileges='user'
    )


@pytest.fixture
def other_user(db):
    return User.objects.create_user(
        username='other', password='pw', email='other@test.com', privileges='user'
    )


@pytest.fixture
def pending_user(db):
    return User.objects.create_user(
        username='newbie', password='pw', email='newbie@test.com'
    )


# ---------------------------------------------------------------------------
# API clients
# ---------------------------------------------------------------------------

def _client_for(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def anon_client():
    return APIClient()


@pytest.fixture
def admin_client(admin_user):
    return _client_for(admin_user)


@pytest.fixture
def maintainer_client(maintainer_user):
    return _client_for(maintainer_user)


@pytest.fixture
def owner_client(owner_user):
    return _client_for(owner_user)


@pytest.fixture
def other_client(other_user):
    return _client_for(other_user)


@pytest.fixture
def pending_client(pending_user):
    return _client_for(pending_user)


# ---------------------------------------------------------------------------
# Aircraft
# ---------------------------------------------------------------------------

@pytest.fixture
def aircraft(db):
    return Aircraft.objects.create(
        tail_number='N12345',
        make='Cessna',
        model='172',
        year=1978,
        last_hobbs=100.0,
    )


@pytest.fixture
def second_aircraft(db):
    return Aircraft.objects.create(
        tail_number='N67890',
        make='Piper',
        model='PA-28',
        last_hobbs=2500.0,
    )


@pytest.fixture
def subscription(aircraft, other_user):
    return AircraftSubscription.objects.create(aircraft=aircraft, user=other_user)


# ---------------------------------------------------------------------------
# Reservations
# ---------------------------------------------------------------------------

@pytest.fixture
def reservation(aircraft, owner_user):
    return Reservation.objects.create(
        aircraft=aircraft,
        user=owner_user,
        title='Personal',
        start_time=hours(0),
        end_time=hours(2),
        notes='Local flight',
    )


@pytest.fixture
def completed_reservation(aircraft, owner_user):
    return Reservation.objects.create(
        aircraft=aircraft,
        user=owner_user,
        title='Shared',
        start_time=hours(-48),
        end_time=hours(-46),
        start_hobbs=98.0,
        end_hobbs=100.0,
        completed_at=hours(-46),
    )


# ---------------------------------------------------------------------------
# Issues
# ---------------------------------------------------------------------------

@pytest.fixture
def issue(aircraft, owner_user):
    return Issue.objects.create(
        aircraft=aircraft,
        reported_by=owner_user,
        title='Left brake squeaks',
        severity='low',
    )


@pytest.fixture
def grounding_issue(aircraft, owner_user):
    return Issue.objects.create(
        aircraft=aircraft,
        reported_by=owner_user,
        title='Cracked prop',
        severity='grounding',
    )
