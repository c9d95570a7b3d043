from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth import get_user_model

User = get_user_model()


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['id', 'username', 'email', 'role', 'is_confirmed', 'date_joined']
    list_filter = ['role', 'is_confirmed', 'is_superuser']
    search_fields = ['username', 'email', 'first_name', 'last_name']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Access', {'fields': ('role', 'is_confirmed')}),
    )
    actions = ['confirm_users']

    @admin.action(description='Confirm selected users')
    def confirm_users(self, request, queryset):
        updated = queryset.update(is_confirmed=True)
        self.message_user(request, f"{updated} user(s) confirmed.")
