from django.urls import path
from .views import settings_view, public_diagnostics, admin_diagnostics, verify_and_repair

urlpatterns = [
    path('settings/', settings_view, name='settings'),
    path('public/diagnostics/', public_diagnostics, name='public-diagnostics'),
    path('admin/diagnostics/', admin_diagnostics, name='admin-diagnostics'),
    path('admin/db-verify-repair/', verify_and_repair, name='db-verify-repair'),
]
