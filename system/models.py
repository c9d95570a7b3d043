from django.db import models


class Setting(models.Model):
    """Key/value application settings editable from the admin dashboard"""
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True, default='')
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'settings'
        ordering = ['key']

    def __str__(self):
        return self.key

    @classmethod
    def get_value(cls, key, default=''):
        setting = cls.objects.filter(key=key).only('value').first()
        return setting.value if setting else default

    @classmethod
    def as_dict(cls):
        return dict(cls.objects.values_list('key', 'value'))
