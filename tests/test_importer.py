import re

import pytest
from django.db import DatabaseError, connection

from people.exceptions import InvalidPayload, DanglingGuardianReference, PersistenceFailure
from people.importer import ProfileImporter, resolve_guardian_ids
from people.models import Person
from people.store import PeopleStore
from people.submissions import StaffSubmission, GuardianSubmission, StudentSubmission

from .conftest import FakeBioGenerator, FakeRosterLookup, PHOTO_URL

pytestmark = pytest.mark.django_db


def guardian(temp_id, first, last):
    return GuardianSubmission(temp_id=temp_id, first_name=first, last_name=last, image=PHOTO_URL)


def student(temp_id, first, last, guardian_ids=None, guardian_temp_ids=None, class_name='Grade 5'):
    return StudentSubmission(
        temp_id=temp_id, first_name=first, last_name=last, image=PHOTO_URL, class_name=class_name,
        guardian_ids=guardian_ids or [], guardian_temp_ids=guardian_temp_ids or [],
    )


def make_importer(bio=None, roster=None, **kwargs):
    return ProfileImporter(
        bio_generator=bio or FakeBioGenerator(),
        roster_lookup=roster or FakeRosterLookup(),
        **kwargs,
    )


class FailingStudentStore(PeopleStore):
    """Inserts guardians, then fails on the student insert"""

    def __init__(self):
        self.calls = 0

    def bulk_insert(self, rows):
        self.calls += 1
        if self.calls > 1:
            raise DatabaseError('disk full')
        return super().bulk_insert(rows)


def test_student_links_to_guardians_created_in_same_batch():
    batch = [
        guardian('a', 'Marcus', 'Cole'),
        guardian('b', 'Olivia', 'Chen'),
        student('c', 'Leo', 'Cole', guardian_temp_ids=['a', 'b']),
    ]

    result = make_importer().run(batch)

    assert set(result.ids) == {'a', 'b', 'c'}
    assert Person.objects.count() == 3
    leo = Person.objects.get(pk=result.ids['c'])
    assert leo.guardian_ids == [result.ids['a'], result.ids['b']]
    assert Person.objects.get(pk=result.ids['a']).category == Person.PARENT


def test_staff_only_batch_uses_synthesized_roster_ids():
    roster = FakeRosterLookup({'Eleanor Vance': 'GS-83610'})
    batch = [StaffSubmission(temp_id='s1', first_name='Eleanor', last_name='Vance', image=PHOTO_URL, role='Principal')]

    result = make_importer(roster=roster).run(batch)

    eleanor = Person.objects.get(pk=result.ids['s1'])
    assert eleanor.role == 'Principal'
    assert eleanor.guardian_ids == []
    # Staff and guardians never hit the roster
    assert roster.calls == []
    assert re.match(r'^GS-\d{5}$', eleanor.external_roster_id)


def test_guardian_ids_are_deduplicated_in_first_seen_order(make_person):
    existing = make_person(first_name='Nora', last_name='Hale')
    batch = [
        guardian('a', 'Marcus', 'Cole'),
        student('c', 'Leo', 'Cole', guardian_ids=[existing.id, existing.id], guardian_temp_ids=['a', 'a']),
    ]

    result = make_importer().run(batch)

    leo = Person.objects.get(pk=result.ids['c'])
    assert leo.guardian_ids == [existing.id, result.ids['a']]


def test_guardians_are_inserted_before_students_regardless_of_input_order():
    batch = [
        student('c', 'Leo', 'Cole', guardian_temp_ids=['a']),
        guardian('a', 'Marcus', 'Cole'),
    ]

    result = make_importer().run(batch)

    assert result.ids['a'] < result.ids['c']
    assert Person.objects.get(pk=result.ids['c']).guardian_ids == [result.ids['a']]


def test_dangling_temp_id_is_dropped_with_warning():
    batch = [
        guardian('a', 'Marcus', 'Cole'),
        student('c', 'Leo', 'Cole', guardian_temp_ids=['a', 'zzz']),
    ]

    result = make_importer().run(batch)

    assert Person.objects.get(pk=result.ids['c']).guardian_ids == [result.ids['a']]
    assert any('zzz' in warning for warning in result.warnings)


def test_strict_mode_rejects_dangling_temp_id_before_insert():
    batch = [
        guardian('a', 'Marcus', 'Cole'),
        student('c', 'Leo', 'Cole', guardian_temp_ids=['zzz']),
    ]

    with pytest.raises(DanglingGuardianReference):
        make_importer(strict_guardians=True).run(batch)

    assert Person.objects.count() == 0


def test_bio_failure_falls_back_and_warns():
    bio = FakeBioGenerator(fail=True)
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    result = make_importer(bio=bio).run(batch)

    assert set(Person.objects.values_list('bio', flat=True)) == {'A valued member of our community.'}
    assert len(result.warnings) == 2


def test_bio_generator_receives_role_or_class():
    bio = FakeBioGenerator()
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'], class_name='Grade 3')]

    make_importer(bio=bio).run(batch)

    assert ('Marcus', 'Cole', Person.PARENT, 'Parent/Guardian') in bio.calls
    assert ('Leo', 'Cole', Person.STUDENT, 'Grade 3') in bio.calls
    leo = Person.objects.get(first_name='Leo')
    assert leo.bio == 'Leo is a wonderful Grade 3.'


def test_student_roster_id_comes_from_roster_when_found():
    roster = FakeRosterLookup({'Leo Cole': 'GS-48265'})
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    result = make_importer(roster=roster).run(batch)

    assert Person.objects.get(pk=result.ids['c']).external_roster_id == 'GS-48265'
    assert roster.calls == [('Leo', 'Cole')]


def test_student_roster_id_is_synthesized_when_not_found():
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    result = make_importer().run(batch)

    assert re.match(r'^GS-\d{5}$', Person.objects.get(pk=result.ids['c']).external_roster_id)
    assert result.warnings == []


def test_roster_error_is_synthesized_and_reported():
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    result = make_importer(roster=FakeRosterLookup(fail=True)).run(batch)

    assert re.match(r'^GS-\d{5}$', Person.objects.get(pk=result.ids['c']).external_roster_id)
    assert any('roster lookup failed' in warning for warning in result.warnings)


def test_resubmitting_a_batch_creates_duplicates():
    def batch():
        return [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    first = make_importer().run(batch())
    second = make_importer().run(batch())

    assert Person.objects.count() == 4
    assert first.ids['a'] != second.ids['a']


def test_threaded_enrichment_keeps_input_order():
    batch = [guardian(f"g{i}", f"Parent{i}", 'Doe') for i in range(6)]

    result = make_importer(max_workers=4).run(batch)

    for i in range(6):
        assert Person.objects.get(pk=result.ids[f"g{i}"]).first_name == f"Parent{i}"


def test_student_failure_rolls_back_guardians_when_atomic():
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    with pytest.raises(PersistenceFailure):
        make_importer(store=FailingStudentStore(), atomic=True).run(batch)

    assert Person.objects.count() == 0


def test_student_failure_keeps_guardians_when_not_atomic():
    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]

    with pytest.raises(PersistenceFailure) as excinfo:
        make_importer(store=FailingStudentStore(), atomic=False).run(batch)

    assert 'disk full' in excinfo.value.as_response_data()['details']
    assert list(Person.objects.values_list('first_name', flat=True)) == ['Marcus']


@pytest.mark.parametrize('payload', [[], None, {'tempId': 'a'}, ['not a submission']])
def test_invalid_batches_are_rejected(payload):
    with pytest.raises(InvalidPayload):
        make_importer().run(payload)
    assert Person.objects.count() == 0


def test_resolve_guardian_ids_reports_unresolved():
    leo = student('c', 'Leo', 'Cole', guardian_ids=[7], guardian_temp_ids=['a', 'b', 'a'])

    resolved, unresolved = resolve_guardian_ids(leo, {'a': 7, 'x': 9})

    assert resolved == [7]
    assert unresolved == ['b']


@pytest.mark.django_db(transaction=True)
def test_external_calls_run_outside_the_transaction():
    states = []

    class RecordingBio(FakeBioGenerator):
        def generate(self, *args):
            states.append(('bio', connection.in_atomic_block))
            return super().generate(*args)

    class RecordingRoster(FakeRosterLookup):
        def lookup(self, *args):
            states.append(('roster', connection.in_atomic_block))
            return super().lookup(*args)

    class RecordingStore(PeopleStore):
        def bulk_insert(self, rows):
            states.append(('insert', connection.in_atomic_block))
            return super().bulk_insert(rows)

    batch = [guardian('a', 'Marcus', 'Cole'), student('c', 'Leo', 'Cole', guardian_temp_ids=['a'])]
    importer = ProfileImporter(bio_generator=RecordingBio(), roster_lookup=RecordingRoster(),
                               store=RecordingStore(), max_workers=1, atomic=True)

    importer.run(batch)

    assert states == [
        ('bio', False),
        ('bio', False),
        ('roster', False),
        ('insert', True),
        ('insert', True),
    ]


def test_duplicate_temp_ids_are_rejected_before_insert():
    batch = [guardian('a', 'Marcus', 'Cole'), guardian('a', 'Olivia', 'Chen')]

    with pytest.raises(InvalidPayload) as excinfo:
        make_importer().run(batch)

    assert 'a' in excinfo.value.as_response_data()['details']
    assert Person.objects.count() == 0
