from django.contrib import admin
from .models import AccessLog


@admin.register(AccessLog)
class AccessLogAdmin(admin.ModelAdmin):
    list_display = ['id', 'person', 'direction', 'location', 'recorded_by', 'created_at']
    list_filter = ['direction', 'location', 'created_at']
    search_fields = ['person__first_name', 'person__last_name', 'location']
