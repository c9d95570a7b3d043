from django.conf import settings
from django.db import models
from people.models import Person


class AccessLog(models.Model):
    ENTRY = 'entry'
    EXIT = 'exit'
    DIRECTION_CHOICES = [
        (ENTRY, 'Entry'),
        (EXIT, 'Exit'),
    ]

    person = models.ForeignKey(Person, on_delete=models.CASCADE, related_name='access_logs')
    direction = models.CharField(max_length=10, choices=DIRECTION_CHOICES)
    location = models.CharField(max_length=100, help_text='Gate or post where the movement was recorded')
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_access_logs',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'access_logs'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['created_at'], name='access_created_idx'),
            models.Index(fields=['person', 'created_at'], name='access_person_created_idx'),
        ]

    def __str__(self):
        return f"{self.person.full_name} - {self.direction} - {self.location}"
