from django.contrib import admin
from .models import Person


@admin.register(Person)
class PersonAdmin(admin.ModelAdmin):
    list_display = ['id', 'last_name', 'first_name', 'category', 'role', 'class_name', 'external_roster_id']
    list_filter = ['category']
    search_fields = ['first_name', 'last_name', 'external_roster_id']
    readonly_fields = ['created_at']
