import logging

from rest_framework import generics, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django.contrib.auth import get_user_model

from .permissions import IsAdminRole
from .serializers import (
    UserSerializer,
    PendingUserSerializer,
    UserRegistrationSerializer,
    RoleUpdateSerializer,
)

User = get_user_model()
logger = logging.getLogger(__name__)


class UserRegistrationView(generics.CreateAPIView):
    queryset = User.objects.all()
    serializer_class = UserRegistrationSerializer
    permission_classes = [permissions.AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info(f"New registration pending confirmation: {user.email}")

        return Response({
            "user": UserSerializer(user).data,
            "message": "Registration received. An administrator must confirm your account."
        }, status=status.HTTP_201_CREATED)


class CurrentUserView(APIView):
    # Pending users may still look themselves up
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class PendingUsersView(generics.ListAPIView):
    serializer_class = PendingUserSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return User.objects.filter(is_confirmed=False, is_superuser=False).order_by('date_joined')


class AdminUserViewSet(mixins.ListModelMixin,
                       mixins.RetrieveModelMixin,
                       mixins.DestroyModelMixin,
                       viewsets.GenericViewSet):
    """User management for administrators"""
    queryset = User.objects.all()
    serializer_class = UserSerializer
    permission_classes = [IsAdminRole]
    pagination_class = None

    def get_queryset(self):
        queryset = User.objects.order_by('email', 'username')
        if self.action == 'list':
            # Pending accounts are listed separately
            queryset = queryset.filter(is_confirmed=True)
        return queryset

    def destroy(self, request, *args, **kwargs):
        user = self.get_object()
        if user.pk == request.user.pk:
            return Response({"error": "You cannot delete your own account."}, status=status.HTTP_400_BAD_REQUEST)
        logger.info(f"User {user} deleted by {request.user}")
        user.delete()
        return Response({"success": True})

    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """Confirm a pending registration"""
        user = self.get_object()
        if user.is_confirmed:
            return Response({"success": True, "message": "User already confirmed"})
        user.is_confirmed = True
        user.save(update_fields=['is_confirmed'])
        logger.info(f"User {user} confirmed by {request.user}")
        return Response({"success": True})

    @action(detail=True, methods=['put'])
    def role(self, request, pk=None):
        """Change a user's role between admin and user"""
        user = self.get_object()
        serializer = RoleUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"error": "Invalid role. Use 'admin' or 'user'."}, status=status.HTTP_400_BAD_REQUEST)

        new_role = serializer.validated_data['role']
        if user.pk == request.user.pk and new_role != 'admin':
            return Response({"error": "You cannot remove your own admin role."}, status=status.HTTP_400_BAD_REQUEST)

        user.role = new_role
        user.save(update_fields=['role'])
        logger.info(f"User {user} role set to {new_role} by {request.user}")
        return Response({"success": True})
