import uuid

import pytest

from core.models import AircraftSubscription

pytestmark = pytest.mark.django_db


class TestSubscriptions:

    def test_list_own_subscriptions(self, other_client, subscription, aircraft):
        resp = other_client.get('/api/subscriptions/')
        assert resp.status_code == 200
        assert resp.data == [str(aircraft.id)]

    def test_list_excludes_other_users(self, owner_client, subscription):
        assert owner_client.get('/api/subscriptions/').data == []

    def test_subscribe(self, owner_client, owner_user, aircraft):
        resp = owner_client.post(f'/api/subscriptions/{aircraft.id}/')
        assert resp.status_code == 200
        assert resp.data == {'subscribed': True, 'aircraft_id': str(aircraft.id)}
        assert AircraftSubscription.objects.filter(user=owner_user, aircraft=aircraft).exists()

    def test_subscribe_twice_is_idempotent(self, other_client, subscription, aircraft):
        resp = other_client.post(f'/api/subscriptions/{aircraft.id}/')
        assert resp.status_code == 200
        assert AircraftSubscription.objects.filter(aircraft=aircraft).count() == 1

    def test_subscribe_unknown_aircraft_404(self, owner_client):
        resp = owner_client.post(f'/api/subscriptions/{uuid.uuid4()}/')
        assert resp.status_code == 404
        assert resp.data['error'] == 'Aircraft not found'

    def test_unsubscribe(self, other_client, subscription, aircraft):
        resp = other_client.delete(f'/api/subscriptions/{aircraft.id}/')
        assert resp.status_code == 200
        assert resp.data['subscribed'] is False
        assert not AircraftSubscription.objects.exists()

    def test_pending_user_403(self, pending_client, aircraft):
        assert pending_client.post(f'/api/subscriptions/{aircraft.id}/').status_code == 403
