import logging

from django.db import DatabaseError

from .models import Person

logger = logging.getLogger(__name__)


class PeopleStore:
    """Bulk persistence of Person rows"""

    def bulk_insert(self, rows):
        """
        Insert rows in one statement and return their primary keys in input order.

        Relies on the backend returning ids from bulk inserts (Postgres, SQLite 3.35+).
        Raises django.db.DatabaseError on failure.
        """
        if not rows:
            return []
        created = Person.objects.bulk_create(rows)
        ids = [person.pk for person in created]
        if any(pk is None for pk in ids):
            raise DatabaseError("Database backend did not return primary keys for bulk insert")
        logger.debug(f"Inserted {len(ids)} people: {ids}")
        return ids
