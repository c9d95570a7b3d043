"""
Submission variants for batch profile creation.

A submission is a client request to create one profile. It only lives for the
duration of a batch import; the temp_id correlates students with guardians that
are created in the same batch.
"""

from dataclasses import dataclass, field
from typing import List

from .models import Person


@dataclass
class Submission:
    temp_id: str
    first_name: str
    last_name: str
    image: str

    category = None  # set on each variant

    @property
    def is_student(self):
        return self.category == Person.STUDENT

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def bio_label(self):
        """Role or class passed to the bio generator"""
        raise NotImplementedError

    def to_person(self, bio, external_roster_id, guardian_ids=None):
        raise NotImplementedError


@dataclass
class StaffSubmission(Submission):
    role: str = ''

    category = Person.STAFF

    def bio_label(self):
        return self.role or 'Staff'

    def to_person(self, bio, external_roster_id, guardian_ids=None):
        return Person(
            category=self.category,
            first_name=self.first_name,
            last_name=self.last_name,
            image=self.image,
            role=self.role,
            bio=bio,
            external_roster_id=external_roster_id,
        )


@dataclass
class GuardianSubmission(StaffSubmission):
    role: str = 'Parent/Guardian'

    category = Person.PARENT

    def bio_label(self):
        return self.role or 'Parent'


@dataclass
class StudentSubmission(Submission):
    class_name: str = ''
    guardian_ids: List[int] = field(default_factory=list)
    guardian_temp_ids: List[str] = field(default_factory=list)

    category = Person.STUDENT

    def bio_label(self):
        return self.class_name

    def to_person(self, bio, external_roster_id, guardian_ids=None):
        return Person(
            category=self.category,
            first_name=self.first_name,
            last_name=self.last_name,
            image=self.image,
            class_name=self.class_name,
            guardian_ids=list(guardian_ids or []),
            bio=bio,
            external_roster_id=external_roster_id,
        )
