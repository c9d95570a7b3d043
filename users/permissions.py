from rest_framework import permissions


class IsConfirmedUser(permissions.BasePermission):
    """
    Authenticated and confirmed by an admin.
    Pending registrations can log in but cannot use the API.
    """
    message = 'Your account is pending confirmation by an administrator.'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(user.is_confirmed or user.is_superuser)


class IsAdminRole(IsConfirmedUser):
    """Confirmed user whose role is admin."""
    message = 'Administrator access required.'

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        return request.user.role == 'admin' or request.user.is_superuser


class RolePermission(permissions.BasePermission):
    """
    Role based permission for profile data.
    - Reads allowed to every confirmed user
    - Create/Update/Delete allowed based on role mapping
    """

    role_map = {
        'user': ['view', 'create', 'change'],
        'admin': ['view', 'create', 'change', 'delete'],
    }

    def has_permission(self, request, view):
        if not IsConfirmedUser().has_permission(request, view):
            return False

        if request.method in permissions.SAFE_METHODS:
            return True

        if request.user.is_superuser:
            return True

        # map method to action
        if request.method == 'POST':
            action = 'create'
        elif request.method in ('PUT', 'PATCH'):
            action = 'change'
        elif request.method == 'DELETE':
            action = 'delete'
        else:
            action = 'view'

        allowed = self.role_map.get(request.user.role, [])
        return action in allowed
