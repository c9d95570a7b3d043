from django.db import models


class Person(models.Model):
    STAFF = 'Staff'
    STUDENT = 'Student'
    PARENT = 'Parent/Guardian'
    CATEGORY_CHOICES = [
        (STAFF, 'Staff'),
        (STUDENT, 'Student'),
        (PARENT, 'Parent/Guardian'),
    ]
    # Categories a student may be linked to as guardian
    GUARDIAN_CATEGORIES = (STAFF, PARENT)

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    first_name = models.CharField(max_length=50)
    last_name = models.CharField(max_length=50)
    image = models.TextField(help_text='Image URL or data URI')
    role = models.CharField(max_length=50, blank=True, null=True, help_text='Staff and Parent/Guardian only')
    class_name = models.CharField(max_length=50, blank=True, null=True, db_column='class', help_text='Students only (e.g., Grade 5)')
    guardian_ids = models.JSONField(default=list, blank=True, help_text='Ordered ids of guardian profiles; students only')
    bio = models.TextField()
    external_roster_id = models.CharField(max_length=20)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'people'
        ordering = ['last_name', 'first_name']
        indexes = [
            models.Index(fields=['category'], name='people_category_idx'),
            models.Index(fields=['last_name', 'first_name'], name='people_name_idx'),
        ]

    def __str__(self):
        return f"{self.full_name} ({self.category})"

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_student(self):
        return self.category == self.STUDENT

    def save(self, *args, **kwargs):
        # Only students carry guardian links and a class
        if not self.is_student:
            self.guardian_ids = []
            self.class_name = None
        else:
            self.role = None
        super().save(*args, **kwargs)
