import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from people.models import Person
from people.service_result import ServiceResult

User = get_user_model()

PHOTO_URL = 'https://picsum.photos/seed/test/200/200'


@pytest.fixture(autouse=True)
def _test_settings(settings):
    settings.SECURE_SSL_REDIRECT = False
    settings.BIO_PROVIDER = 'disabled'
    settings.BIO_MODEL = ''
    settings.ROSTER_SHEET_ID = ''
    settings.PEOPLE_IMPORT_ATOMIC = True
    settings.PEOPLE_IMPORT_STRICT_GUARDIANS = False


class FakeBioGenerator:
    """Returns a canned bio, or the fallback when told to fail"""

    def __init__(self, fail=False, fallback='A valued member of our community.'):
        self.fail = fail
        self.fallback = fallback
        self.calls = []

    def generate(self, first_name, last_name, category, role_or_class):
        self.calls.append((first_name, last_name, category, role_or_class))
        if self.fail:
            return ServiceResult.degraded(self.fallback, 'service unavailable')
        return ServiceResult.ok(f"{first_name} is a wonderful {role_or_class}.")


class FakeRosterLookup:
    """In-memory roster keyed by lowercase full name"""

    def __init__(self, roster=None, fail=False):
        self.roster = {k.lower(): v for k, v in (roster or {}).items()}
        self.fail = fail
        self.calls = []

    def lookup(self, first_name, last_name):
        self.calls.append((first_name, last_name))
        if self.fail:
            return ServiceResult.degraded(None, 'sheet unreachable')
        value = self.roster.get(f"{first_name} {last_name}".lower())
        return ServiceResult.ok(value) if value else ServiceResult.missing()


@pytest.fixture
def bio_generator():
    return FakeBioGenerator()


@pytest.fixture
def roster_lookup():
    return FakeRosterLookup()


@pytest.fixture
def admin_account(db):
    return User.objects.create_user(
        username='admin@school.test', email='admin@school.test', password='pass1234',
        role='admin', is_confirmed=True,
    )


@pytest.fixture
def operator_account(db):
    return User.objects.create_user(
        username='gate@school.test', email='gate@school.test', password='pass1234',
        role='user', is_confirmed=True,
    )


@pytest.fixture
def pending_account(db):
    return User.objects.create_user(
        username='new@school.test', email='new@school.test', password='pass1234',
    )


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_api(admin_account):
    client = APIClient()
    client.force_authenticate(admin_account)
    return client


@pytest.fixture
def operator_api(operator_account):
    client = APIClient()
    client.force_authenticate(operator_account)
    return client


@pytest.fixture
def make_person(db):
    def _make(category=Person.PARENT, first_name='Marcus', last_name='Cole', **extra):
        defaults = {
            'image': PHOTO_URL,
            'bio': 'A valued member of our community.',
            'external_roster_id': 'GS-10000',
        }
        if category == Person.STUDENT:
            defaults['class_name'] = 'Grade 5'
        else:
            defaults['role'] = 'Parent/Guardian' if category == Person.PARENT else 'Teacher'
        defaults.update(extra)
        return Person.objects.create(category=category, first_name=first_name, last_name=last_name, **defaults)
    return _make
