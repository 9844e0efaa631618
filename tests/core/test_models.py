import pytest
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from core.models import Aircraft, AircraftSubscription

pytestmark = pytest.mark.django_db

User = get_user_model()


class TestUserModel:

    def test_new_accounts_are_pending(self, pending_user):
        assert pending_user.privileges == 'pending'
        assert pending_user.is_approved is False

    def test_superuser_defaults_to_admin(self, superuser):
        assert superuser.privileges == 'admin'
        assert superuser.privilege_level == 'admin'

    def test_superuser_flag_wins(self, owner_user):
        owner_user.is_superuser = True
        assert owner_user.privilege_level == 'admin'

    def test_display_name(self, owner_user):
        assert owner_user.display_name == 'owner'
        owner_user.first_name = 'Ada'
        owner_user.last_name = 'Pilot'
        assert owner_user.display_name == 'Ada Pilot'


class TestAircraftModel:

    def test_str(self, aircraft):
        assert str(aircraft) == 'N12345 - Cessna 172'

    def test_tail_number_unique(self, aircraft):
        with pytest.raises(IntegrityError), transaction.atomic():
            Aircraft.objects.create(tail_number='N12345', make='Piper', model='Cub')


class TestAircraftSubscription:

    def test_one_per_user_and_aircraft(self, subscription):
        with pytest.raises(IntegrityError), transaction.atomic():
            AircraftSubscription.objects.create(aircraft=subscription.aircraft, user=subscription.user)

    def test_str(self, subscription):
        assert str(subscription) == 'other subscribed to N12345'
