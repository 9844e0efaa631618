"""
API tests for AircraftViewSet: admin-only writes, tail number uniqueness,
the write-once Hobbs meter and cascade deletion.
"""

import uuid
from decimal import Decimal

import pytest

from core.models import Aircraft, AircraftEvent, AircraftSubscription
from maintenance.models import Issue
from reservations.models import Reservation

pytestmark = pytest.mark.django_db


class TestAircraftRead:

    def test_any_approved_user_lists(self, owner_client, aircraft, second_aircraft):
        resp = owner_client.get('/api/aircraft/')
        assert resp.status_code == 200
        assert [a['tail_number'] for a in resp.data] == ['N12345', 'N67890']

    def test_pending_user_403(self, pending_client, aircraft):
        assert pending_client.get('/api/aircraft/').status_code == 403

    def test_anonymous_401(self, anon_client):
        assert anon_client.get('/api/aircraft/').status_code == 401

    def test_grounded_flag(self, owner_client, aircraft, grounding_issue, issue):
        resp = owner_client.get(f'/api/aircraft/{aircraft.id}/')
        assert resp.data['grounded'] is True
        assert resp.data['open_issue_count'] == 2

    def test_resolved_grounding_issue_does_not_ground(self, owner_client, aircraft, grounding_issue):
        grounding_issue.set_status('resolved')
        grounding_issue.save()
        resp = owner_client.get(f'/api/aircraft/{aircraft.id}/')
        assert resp.data['grounded'] is False
        assert resp.data['open_issue_count'] == 0

    def test_maintenance_status_action(self, owner_client, aircraft, grounding_issue):
        resp = owner_client.get(f'/api/aircraft/{aircraft.id}/maintenance_status/')
        assert resp.status_code == 200
        assert resp.data == {
            'grounded': True,
            'open_issue_count': 1,
            'grounding_issues': [str(grounding_issue.id)],
        }

    def test_events_action(self, owner_client, owner_user, reservation):
        from reservations import services
        services.complete_reservation(owner_user, reservation.id, 100.0, 101.0)
        resp = owner_client.get(f'/api/aircraft/{reservation.aircraft_id}/events/')
        assert resp.status_code == 200
        assert resp.data['events'][0]['event_name'] == 'Hobbs updated to 101.0'

    def test_events_bad_limit(self, owner_client, aircraft):
        resp = owner_client.get(f'/api/aircraft/{aircraft.id}/events/', {'limit': 'many'})
        assert resp.status_code == 400


class TestAircraftCreate:

    def test_admin_creates_with_initial_hobbs(self, admin_client):
        resp = admin_client.post('/api/aircraft/', {
            'tail_number': ' n999ab ',
            'make': 'Piper',
            'model': 'J-3',
            'year': 1946,
            'last_hobbs': '1234.5',
        }, format='json')
        assert resp.status_code == 201
        aircraft = Aircraft.objects.get(pk=resp.data['id'])
        assert aircraft.tail_number == 'N999AB'
        assert aircraft.last_hobbs == Decimal('1234.5')
        assert AircraftEvent.objects.filter(aircraft=aircraft, event_name='Aircraft created').exists()

    @pytest.mark.parametrize('client_name', ['owner_client', 'maintainer_client'])
    def test_non_admin_403(self, request, client_name):
        client = request.getfixturevalue(client_name)
        resp = client.post('/api/aircraft/', {'tail_number': 'N1', 'make': 'A', 'model': 'B'}, format='json')
        assert resp.status_code == 403
        assert not Aircraft.objects.exists()

    def test_duplicate_tail_409(self, admin_client, aircraft):
        resp = admin_client.post('/api/aircraft/', {
            'tail_number': 'n12345', 'make': 'Cessna', 'model': '152',
        }, format='json')
        assert resp.status_code == 409
        assert resp.data == {'error': 'Tail number already exists', 'code': 'conflict'}

    def test_missing_make_400(self, admin_client):
        resp = admin_client.post('/api/aircraft/', {'tail_number': 'N1', 'make': ' ', 'model': 'B'}, format='json')
        assert resp.status_code == 400
        assert 'make' in resp.data['errors']

    def test_negative_hobbs_400(self, admin_client):
        resp = admin_client.post('/api/aircraft/', {
            'tail_number': 'N1', 'make': 'A', 'model': 'B', 'last_hobbs': '-1',
        }, format='json')
        assert resp.status_code == 400

    def test_year_out_of_range_400(self, admin_client):
        resp = admin_client.post('/api/aircraft/', {
            'tail_number': 'N1', 'make': 'A', 'model': 'B', 'year': 1850,
        }, format='json')
        assert resp.status_code == 400


class TestAircraftUpdate:

    def test_admin_updates(self, admin_client, aircraft):
        resp = admin_client.patch(f'/api/aircraft/{aircraft.id}/', {'model': '172N'}, format='json')
        assert resp.status_code == 200
        aircraft.refresh_from_db()
        assert aircraft.model == '172N'

    def test_hobbs_is_read_only_after_creation(self, admin_client, aircraft):
        resp = admin_client.patch(f'/api/aircraft/{aircraft.id}/', {'last_hobbs': '5000.0'}, format='json')
        assert resp.status_code == 200
        aircraft.refresh_from_db()
        assert aircraft.last_hobbs == Decimal('100.0')

    def test_tail_taken_by_other_409(self, admin_client, aircraft, second_aircraft):
        resp = admin_client.put(f'/api/aircraft/{second_aircraft.id}/', {
            'tail_number': 'N12345', 'make': 'Piper', 'model': 'PA-28',
        }, format='json')
        assert resp.status_code == 409
        assert resp.data['error'] == 'Tail number already in use by another aircraft'

    def test_keeping_own_tail_ok(self, admin_client, aircraft):
        resp = admin_client.put(f'/api/aircraft/{aircraft.id}/', {
            'tail_number': 'N12345', 'make': 'Cessna', 'model': '172M',
        }, format='json')
        assert resp.status_code == 200

    def test_user_403(self, owner_client, aircraft):
        resp = owner_client.patch(f'/api/aircraft/{aircraft.id}/', {'model': 'X'}, format='json')
        assert resp.status_code == 403


class TestAircraftDelete:

    def test_admin_delete_cascades(self, admin_client, aircraft, reservation, issue, subscription):
        resp = admin_client.delete(f'/api/aircraft/{aircraft.id}/')
        assert resp.status_code == 200
        assert resp.data == {'message': 'Aircraft deleted'}
        assert not Aircraft.objects.filter(pk=aircraft.pk).exists()
        assert not Reservation.objects.filter(aircraft_id=aircraft.pk).exists()
        assert not Issue.objects.filter(aircraft_id=aircraft.pk).exists()
        assert not AircraftSubscription.objects.filter(aircraft_id=aircraft.pk).exists()
        assert not AircraftEvent.objects.filter(aircraft_id=aircraft.pk).exists()

    def test_missing_404(self, admin_client):
        assert admin_client.delete(f'/api/aircraft/{uuid.uuid4()}/').status_code == 404
