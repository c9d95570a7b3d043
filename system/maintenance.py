import logging

from django.conf import settings
from django.db import transaction

from people.bio_service import DEFAULT_FALLBACK
from people.models import Person
from people.roster_service import synthesize_roster_id

logger = logging.getLogger(__name__)


def verify_and_repair_people():
    """
    Check profile integrity and fix what can be fixed in place.

    - students: drop guardian ids that point at missing or non-guardian profiles
    - non-students: clear guardian ids and class
    - any profile: fill a blank bio or roster id
    Returns counts of what was repaired.
    """
    report = {
        'checked': 0,
        'dangling_guardian_links_removed': 0,
        'students_without_guardians': 0,
        'non_student_links_cleared': 0,
        'bios_filled': 0,
        'roster_ids_filled': 0,
    }
    fallback_bio = getattr(settings, 'BIO_FALLBACK', DEFAULT_FALLBACK)
    guardian_ids = set(
        Person.objects.filter(category__in=Person.GUARDIAN_CATEGORIES).values_list('id', flat=True)
    )

    with transaction.atomic():
        for person in Person.objects.select_for_update().all():
            report['checked'] += 1
            changed = []

            if person.is_student:
                links = person.guardian_ids or []
                kept = [gid for gid in links if gid in guardian_ids]
                if kept != links:
                    report['dangling_guardian_links_removed'] += len(links) - len(kept)
                    person.guardian_ids = kept
                    changed.append('guardian_ids')
                if not kept:
                    report['students_without_guardians'] += 1
            elif person.guardian_ids or person.class_name:
                report['non_student_links_cleared'] += 1
                person.guardian_ids = []
                person.class_name = None
                changed.extend(['guardian_ids', 'class_name'])

            if not (person.bio or '').strip():
                person.bio = fallback_bio
                report['bios_filled'] += 1
                changed.append('bio')

            if not (person.external_roster_id or '').strip():
                person.external_roster_id = synthesize_roster_id()
                report['roster_ids_filled'] += 1
                changed.append('external_roster_id')

            if changed:
                Person.objects.filter(pk=person.pk).update(**{name: getattr(person, name) for name in changed})

    logger.info(f"Profile integrity check finished: {report}")
    return report
