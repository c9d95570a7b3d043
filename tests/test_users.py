import pytest
from django.contrib.auth import get_user_model

pytestmark = pytest.mark.django_db

User = get_user_model()


def test_registration_creates_pending_user(api_client):
    response = api_client.post('/api/users/register/', {
        'email': 'newstaff@school.test', 'password': 'S3cure-pass!', 'confirm_password': 'S3cure-pass!',
    }, format='json')

    assert response.status_code == 201
    user = User.objects.get(email='newstaff@school.test')
    assert not user.is_confirmed
    assert user.role == 'user'


def test_registration_rejects_duplicate_email(api_client, operator_account):
    response = api_client.post('/api/users/register/', {
        'email': operator_account.email, 'password': 'S3cure-pass!', 'confirm_password': 'S3cure-pass!',
    }, format='json')

    assert response.status_code == 400


def test_pending_user_can_fetch_self_but_not_profiles(api_client, pending_account):
    api_client.force_authenticate(pending_account)

    assert api_client.get('/api/users/me/').json()['is_confirmed'] is False
    assert api_client.get('/api/people/').status_code == 403


def test_admin_lists_pending_and_confirms(admin_api, pending_account):
    pending = admin_api.get('/api/users/admin/pending-users/').json()
    assert [u['email'] for u in pending] == [pending_account.email]

    response = admin_api.post(f"/api/users/admin/users/{pending_account.id}/confirm/")

    assert response.status_code == 200
    pending_account.refresh_from_db()
    assert pending_account.is_confirmed


def test_confirmed_list_excludes_pending(admin_api, admin_account, pending_account):
    emails = [u['email'] for u in admin_api.get('/api/users/admin/users/').json()]

    assert admin_account.email in emails
    assert pending_account.email not in emails


def test_operator_cannot_manage_users(operator_api, pending_account):
    response = operator_api.post(f"/api/users/admin/users/{pending_account.id}/confirm/")

    assert response.status_code == 403


def test_role_change(admin_api, operator_account):
    response = admin_api.put(f"/api/users/admin/users/{operator_account.id}/role/", {'role': 'admin'}, format='json')

    assert response.status_code == 200
    operator_account.refresh_from_db()
    assert operator_account.role == 'admin'


def test_admin_cannot_demote_self(admin_api, admin_account):
    response = admin_api.put(f"/api/users/admin/users/{admin_account.id}/role/", {'role': 'user'}, format='json')

    assert response.status_code == 400


def test_invalid_role_is_rejected(admin_api, operator_account):
    response = admin_api.put(f"/api/users/admin/users/{operator_account.id}/role/", {'role': 'owner'}, format='json')

    assert response.status_code == 400


def test_admin_deletes_user_but_not_self(admin_api, admin_account, pending_account):
    assert admin_api.delete(f"/api/users/admin/users/{admin_account.id}/").status_code == 400

    response = admin_api.delete(f"/api/users/admin/users/{pending_account.id}/")

    assert response.status_code == 200
    assert not User.objects.filter(pk=pending_account.id).exists()
