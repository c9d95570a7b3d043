"""
Batch profile import.

Creates a mixed batch of staff, guardian and student profiles in one call.
Guardian-capable profiles are inserted first so that students can reference
guardians created in the same batch through their temp ids.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Dict, List

from django.conf import settings
from django.db import DatabaseError, transaction

from .bio_service import BioGenerator
from .exceptions import InvalidPayload, DanglingGuardianReference, PersistenceFailure
from .roster_service import SheetsRosterLookup, synthesize_roster_id
from .store import PeopleStore
from .submissions import Submission

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    ids: Dict[str, int] = field(default_factory=dict)  # temp_id -> new id
    warnings: List[str] = field(default_factory=list)

    @property
    def created(self):
        return len(self.ids)


def resolve_guardian_ids(student, temp_id_map):
    """
    Direct guardian ids plus the ids mapped from guardian temp ids, in first-seen
    order and without duplicates. Returns (ids, unresolved_temp_ids).
    """
    resolved = []
    seen = set()
    for guardian_id in student.guardian_ids:
        if guardian_id not in seen:
            seen.add(guardian_id)
            resolved.append(guardian_id)

    unresolved = []
    for temp_id in student.guardian_temp_ids:
        guardian_id = temp_id_map.get(temp_id)
        if guardian_id is None:
            unresolved.append(temp_id)
        elif guardian_id not in seen:
            seen.add(guardian_id)
            resolved.append(guardian_id)
    return resolved, unresolved


def _dangling_message(student, temp_ids):
    return (f"{student.full_name}: guardian reference(s) {', '.join(temp_ids)} "
            f"did not match a new guardian in this batch")


class ProfileImporter:

    def __init__(self, bio_generator=None, roster_lookup=None, store=None,
                 max_workers=None, atomic=None, strict_guardians=None):
        self.bio_generator = bio_generator or BioGenerator()
        self.roster_lookup = roster_lookup or SheetsRosterLookup()
        self.store = store or PeopleStore()
        self.max_workers = max_workers or getattr(settings, 'PEOPLE_IMPORT_MAX_WORKERS', 4)
        self.atomic = getattr(settings, 'PEOPLE_IMPORT_ATOMIC', True) if atomic is None else atomic
        self.strict_guardians = (getattr(settings, 'PEOPLE_IMPORT_STRICT_GUARDIANS', False)
                                 if strict_guardians is None else strict_guardians)

    def run(self, submissions):
        if not isinstance(submissions, (list, tuple)) or not submissions:
            raise InvalidPayload(detail='Expected a non-empty list of profiles.')
        if not all(isinstance(s, Submission) for s in submissions):
            raise InvalidPayload(detail='Every item must be a profile submission.')
        self._check_unique_temp_ids(submissions)

        guardian_capable = [s for s in submissions if not s.is_student]
        students = [s for s in submissions if s.is_student]
        result = ImportResult()
        if self.strict_guardians:
            self._check_guardian_references(guardian_capable, students)

        logger.info(f"Importing {len(guardian_capable)} staff/guardian and {len(students)} student profiles")

        # Bio and roster calls happen before any transaction is opened
        guardian_outcomes = self._enrich(guardian_capable, lookup_roster=False)
        student_outcomes = self._enrich(students, lookup_roster=True)

        with transaction.atomic() if self.atomic else nullcontext():
            # Phase 1: staff and guardians, which students may point at
            rows = self._build_rows(guardian_capable, guardian_outcomes, result)
            ids = self._insert(rows, 'staff/guardian')
            for submission, new_id in zip(guardian_capable, ids):
                result.ids[submission.temp_id] = new_id

            # Phase 2: students, with same-batch guardians resolved to real ids
            guardian_links = self._resolve_students(students, result)
            rows = self._build_rows(students, student_outcomes, result, guardian_links=guardian_links)
            ids = self._insert(rows, 'student')
            for submission, new_id in zip(students, ids):
                result.ids[submission.temp_id] = new_id

        logger.info(f"Imported {result.created} profiles with {len(result.warnings)} warning(s)")
        return result

    def _check_unique_temp_ids(self, submissions):
        seen = set()
        duplicates = []
        for submission in submissions:
            if submission.temp_id in seen and submission.temp_id not in duplicates:
                duplicates.append(submission.temp_id)
            seen.add(submission.temp_id)
        if duplicates:
            raise InvalidPayload(detail=f"Duplicate tempId(s) in this batch: {', '.join(duplicates)}")

    def _check_guardian_references(self, guardian_capable, students):
        """Reject the batch before any insert when a student points at an unknown temp id"""
        known = {s.temp_id for s in guardian_capable}
        for student in students:
            unknown = [t for t in student.guardian_temp_ids if t not in known]
            if unknown:
                raise DanglingGuardianReference(detail=_dangling_message(student, unknown))

    def _resolve_students(self, students, result):
        links = []
        for student in students:
            resolved, unresolved = resolve_guardian_ids(student, result.ids)
            if unresolved:
                message = _dangling_message(student, unresolved)
                logger.warning(f"Dropping dangling guardian reference(s). {message}")
                result.warnings.append(message)
            links.append(resolved)
        return links

    def _insert(self, rows, label):
        try:
            return self.store.bulk_insert(rows)
        except DatabaseError as e:
            logger.exception(f"Failed to insert {label} profiles")
            raise PersistenceFailure(detail=str(e)) from e

    def _enrich(self, submissions, lookup_roster):
        """Call the external services for each submission; (bio, roster) pairs in input order"""
        if not submissions:
            return []

        def enrich_one(submission):
            bio = self.bio_generator.generate(
                submission.first_name, submission.last_name, submission.category, submission.bio_label()
            )
            roster = self.roster_lookup.lookup(submission.first_name, submission.last_name) if lookup_roster else None
            return bio, roster

        workers = max(1, min(self.max_workers, len(submissions)))
        if workers == 1:
            return [enrich_one(s) for s in submissions]
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(enrich_one, submissions))

    def _build_rows(self, submissions, outcomes, result, guardian_links=None):
        rows = []
        for index, (submission, (bio, roster)) in enumerate(zip(submissions, outcomes)):
            if bio.fallback:
                logger.warning(f"Using fallback bio for {submission.full_name}: {bio.error}")
                result.warnings.append(f"{submission.full_name}: bio generation unavailable, default bio used")

            external_roster_id = self._roster_id(submission, roster, result)
            guardian_ids = guardian_links[index] if guardian_links is not None else None
            rows.append(submission.to_person(bio.value, external_roster_id, guardian_ids=guardian_ids))
        return rows

    def _roster_id(self, submission, roster, result):
        if roster is None:
            return synthesize_roster_id()
        if roster.found:
            return roster.value
        if roster.error:
            logger.warning(f"Roster lookup error for {submission.full_name}: {roster.error}")
            result.warnings.append(f"{submission.full_name}: roster lookup failed, generated id used")
        else:
            logger.info(f"{submission.full_name} not found in roster, generating id")
        return synthesize_roster_id()
