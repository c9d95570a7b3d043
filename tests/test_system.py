import re
from io import StringIO

import pytest
from django.core.management import call_command

from people.models import Person
from system.maintenance import verify_and_repair_people
from system.models import Setting

pytestmark = pytest.mark.django_db


def test_settings_read_and_admin_update(admin_api, operator_api):
    response = admin_api.put('/api/settings/', {'key': 'googleSheetUrl', 'value': 'https://docs.google.com/x'},
                             format='json')
    assert response.status_code == 200

    assert operator_api.get('/api/settings/').json() == {'googleSheetUrl': 'https://docs.google.com/x'}


def test_operator_cannot_update_settings(operator_api):
    response = operator_api.put('/api/settings/', {'key': 'schoolName', 'value': 'Hill'}, format='json')

    assert response.status_code == 403
    assert not Setting.objects.exists()


def test_settings_update_requires_key(admin_api):
    response = admin_api.put('/api/settings/', {'value': 'x'}, format='json')

    assert response.status_code == 400


def test_public_diagnostics_without_login(api_client):
    body = api_client.get('/api/public/diagnostics/').json()

    assert body['apiStatus']['status'] == 'Success'
    assert body['databaseConnection']['status'] == 'Success'


def test_admin_diagnostics(admin_api, make_person):
    make_person()

    body = admin_api.get('/api/admin/diagnostics/').json()

    assert body['sampleProfileFetch']['data']['firstName'] == 'Marcus'
    assert body['rosterLookup']['status'] == 'Warning'
    assert body['bioGenerator']['status'] == 'Warning'


def test_admin_diagnostics_requires_admin(operator_api):
    assert operator_api.get('/api/admin/diagnostics/').status_code == 403


def test_verify_and_repair_fixes_links(make_person):
    marcus = make_person()
    eleanor = make_person(category=Person.STAFF, first_name='Eleanor', last_name='Vance')
    leo = make_person(category=Person.STUDENT, first_name='Leo', guardian_ids=[marcus.id, 9999])
    mia = make_person(category=Person.STUDENT, first_name='Mia', guardian_ids=[leo.id])
    # Bypass save() to simulate rows written by an older client
    Person.objects.filter(pk=eleanor.pk).update(guardian_ids=[marcus.id], bio='', external_roster_id='')

    report = verify_and_repair_people()

    assert report['checked'] == 4
    assert report['dangling_guardian_links_removed'] == 2
    assert report['students_without_guardians'] == 1
    assert report['non_student_links_cleared'] == 1
    assert report['bios_filled'] == 1
    assert report['roster_ids_filled'] == 1

    leo.refresh_from_db()
    mia.refresh_from_db()
    eleanor.refresh_from_db()
    assert leo.guardian_ids == [marcus.id]
    assert mia.guardian_ids == []
    assert eleanor.guardian_ids == []
    assert eleanor.bio == 'A valued member of our community.'
    assert re.match(r'^GS-\d{5}$', eleanor.external_roster_id)


def test_verify_and_repair_endpoint(admin_api, operator_api):
    assert operator_api.post('/api/admin/db-verify-repair/').status_code == 403

    response = admin_api.post('/api/admin/db-verify-repair/')

    assert response.status_code == 200
    assert response.json()['report']['checked'] == 0


def test_seed_demo_data_links_leo_to_both_guardians():
    call_command('seed_demo_data', stdout=StringIO())

    leo = Person.objects.get(first_name='Leo')
    guardians = Person.objects.filter(pk__in=leo.guardian_ids)
    assert sorted(g.first_name for g in guardians) == ['Marcus', 'Olivia']
    assert Person.objects.count() == 4


def test_seed_demo_data_skips_populated_table(make_person):
    make_person()
    out = StringIO()

    call_command('seed_demo_data', stdout=out)

    assert Person.objects.count() == 1
    assert 'Skipping' in out.getvalue()
