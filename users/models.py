from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('user', 'User'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='user')
    is_confirmed = models.BooleanField(default=False, help_text='Pending accounts cannot use the API until an admin confirms them')

    class Meta:
        ordering = ['email', 'username']
        indexes = [
            models.Index(fields=['is_confirmed'], name='user_confirmed_idx'),
        ]

    @property
    def is_admin(self):
        return self.role == 'admin'

    def __str__(self):
        return self.email or self.username
