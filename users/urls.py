from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import (
    UserRegistrationView,
    CurrentUserView,
    PendingUsersView,
    AdminUserViewSet,
)

router = DefaultRouter()
router.register(r'admin/users', AdminUserViewSet, basename='admin-users')

urlpatterns = [
    path('', include(router.urls)),
    path('register/', UserRegistrationView.as_view(), name='register'),
    path('me/', CurrentUserView.as_view(), name='current-user'),
    path('admin/pending-users/', PendingUsersView.as_view(), name='pending-users'),
]
