import pytest
from django.contrib.auth import get_user_model

pytestmark = pytest.mark.django_db

User = get_user_model()


class TestUserAdminAccess:

    @pytest.mark.parametrize('client_name', ['owner_client', 'maintainer_client', 'pending_client'])
    def test_non_admin_403(self, request, client_name):
        client = request.getfixturevalue(client_name)
        assert client.get('/api/users/').status_code == 403

    def test_admin_lists(self, admin_client, owner_user):
        resp = admin_client.get('/api/users/')
        assert resp.status_code == 200
        usernames = [u['username'] for u in resp.data]
        assert usernames == sorted(usernames)
        assert 'owner' in usernames
        assert all('password' not in u for u in resp.data)

    def test_superuser_counts_as_admin(self, superuser):
        from rest_framework.test import APIClient
        client = APIClient()
        client.force_authenticate(user=superuser)
        assert client.get('/api/users/').status_code == 200

    def test_pending_listing(self, admin_client, pending_user, owner_user):
        resp = admin_client.get('/api/users/pending/')
        assert resp.status_code == 200
        assert [u['username'] for u in resp.data] == ['newbie']


class TestUserCreate:

    def test_create_hashes_password(self, admin_client):
        resp = admin_client.post('/api/users/', {
            'username': 'student',
            'email': 'student@test.com',
            'password': 'secret1',
            'privileges': 'user',
        }, format='json')
        assert resp.status_code == 201
        user = User.objects.get(username='student')
        assert user.check_password('secret1')
        assert user.privileges == 'user'

    def test_duplicate_username_409(self, admin_client, owner_user):
        resp = admin_client.post('/api/users/', {
            'username': 'Owner',
            'email': 'fresh@test.com',
            'password': 'secret1',
            'privileges': 'user',
        }, format='json')
        assert resp.status_code == 409
        assert resp.data['error'] == 'Username or email already in use'

    def test_duplicate_email_409(self, admin_client, owner_user):
        resp = admin_client.post('/api/users/', {
            'username': 'fresh',
            'email': 'owner@test.com',
            'password': 'secret1',
            'privileges': 'user',
        }, format='json')
        assert resp.status_code == 409

    @pytest.mark.parametrize('field,value', [
        ('username', 'ab'),
        ('email', 'not-an-email'),
        ('password', '123'),
        ('privileges', 'pilot'),
    ])
    def test_invalid_fields_400(self, admin_client, field, value):
        data = {
            'username': 'student',
            'email': 'student@test.com',
            'password': 'secret1',
            'privileges': 'user',
        }
        data[field] = value
        resp = admin_client.post('/api/users/', data, format='json')
        assert resp.status_code == 400
        assert field in resp.data['errors']


class TestUserUpdate:

    def test_put_without_password_keeps_it(self, admin_client, owner_user):
        resp = admin_client.put(f'/api/users/{owner_user.id}/', {
            'username': 'owner',
            'email': 'new-owner@test.com',
            'privileges': 'maintainer',
        }, format='json')
        assert resp.status_code == 200
        owner_user.refresh_from_db()
        assert owner_user.email == 'new-owner@test.com'
        assert owner_user.privileges == 'maintainer'
        assert owner_user.check_password('pw')

    def test_put_with_password_changes_it(self, admin_client, owner_user):
        resp = admin_client.put(f'/api/users/{owner_user.id}/', {
            'username': 'owner',
            'email': 'owner@test.com',
            'privileges': 'user',
            'password': 'changed1',
        }, format='json')
        assert resp.status_code == 200
        owner_user.refresh_from_db()
        assert owner_user.check_password('changed1')

    def test_put_email_taken_409(self, admin_client, owner_user, other_user):
        resp = admin_client.put(f'/api/users/{owner_user.id}/', {
            'username': 'owner',
            'email': 'other@test.com',
            'privileges': 'user',
        }, format='json')
        assert resp.status_code == 409

    def test_patch_approves_pending(self, admin_client, pending_user):
        resp = admin_client.patch(f'/api/users/{pending_user.id}/', {'privileges': 'user'}, format='json')
        assert resp.status_code == 200
        pending_user.refresh_from_db()
        assert pending_user.privileges == 'user'

    def test_patch_ignores_other_fields(self, admin_client, owner_user):
        admin_client.patch(f'/api/users/{owner_user.id}/', {'email': 'x@test.com'}, format='json')
        owner_user.refresh_from_db()
        assert owner_user.email == 'owner@test.com'

    def test_cannot_demote_self(self, admin_client, admin_user):
        resp = admin_client.patch(f'/api/users/{admin_user.id}/', {'privileges': 'user'}, format='json')
        assert resp.status_code == 400
        admin_user.refresh_from_db()
        assert admin_user.privileges == 'admin'


class TestUserDelete:

    def test_delete(self, admin_client, other_user):
        resp = admin_client.delete(f'/api/users/{other_user.id}/')
        assert resp.status_code == 200
        assert resp.data == {'message': 'User deleted'}
        assert not User.objects.filter(pk=other_user.pk).exists()

    def test_cannot_delete_self(self, admin_client, admin_user):
        resp = admin_client.delete(f'/api/users/{admin_user.id}/')
        assert resp.status_code == 400
        assert resp.data['error'] == 'Cannot delete your own account'
        assert User.objects.filter(pk=admin_user.pk).exists()

    def test_deleting_user_removes_their_reservations(self, admin_client, owner_user, reservation):
        admin_client.delete(f'/api/users/{owner_user.id}/')
        assert not type(reservation).objects.filter(pk=reservation.pk).exists()
