from django.core.management.base import BaseCommand
from django.db import transaction

from people.models import Person


def picsum(seed):
    return f"https://picsum.photos/seed/{seed}/200/200"


class Command(BaseCommand):
    help = "Seed demo profiles: a principal, two guardians and their student. Skipped when profiles already exist."

    def add_arguments(self, parser):
        parser.add_argument('--force', action='store_true', help='Seed even if the people table is not empty')

    def handle(self, *args, **options):
        existing = Person.objects.count()
        if existing and not options.get('force'):
            self.stdout.write(self.style.WARNING(f"Database already has {existing} profiles. Skipping seed data insertion."))
            return

        with transaction.atomic():
            eleanor = Person.objects.create(
                category=Person.STAFF, first_name='Eleanor', last_name='Vance', role='Principal',
                image=picsum('eleanor'),
                bio='A visionary leader dedicated to fostering an inspiring learning environment.',
                external_roster_id='GS-83610',
            )
            marcus = Person.objects.create(
                category=Person.PARENT, first_name='Marcus', last_name='Cole', role='Parent/Guardian',
                image=picsum('marcus'),
                bio='An engaged parent committed to supporting the school community.',
                external_roster_id='GS-19283',
            )
            olivia = Person.objects.create(
                category=Person.PARENT, first_name='Olivia', last_name='Chen', role='Parent/Guardian',
                image=picsum('olivia'),
                bio='A creative and supportive presence in our community.',
                external_roster_id='GS-55431',
            )
            leo = Person.objects.create(
                category=Person.STUDENT, first_name='Leo', last_name='Cole', class_name='Grade 5',
                image=picsum('leo'),
                bio='A curious and bright student with a passion for science.',
                external_roster_id='GS-48265',
                guardian_ids=[marcus.id, olivia.id],
            )

        self.stdout.write(self.style.SUCCESS(f"Staff: {eleanor.full_name}"))
        self.stdout.write(self.style.SUCCESS(f"Guardians: {marcus.full_name}, {olivia.full_name}"))
        self.stdout.write(self.style.SUCCESS(f"Student: {leo.full_name} (guardians {leo.guardian_ids})"))
        self.stdout.write(self.style.SUCCESS("Demo data seeding complete."))
