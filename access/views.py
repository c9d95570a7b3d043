import logging

from django.db.models import OuterRef, Subquery
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from people.models import Person
from users.permissions import IsConfirmedUser
from .models import AccessLog
from .serializers import AccessLogSerializer, AccessLogCreateSerializer, AccessAnalyticsSerializer

logger = logging.getLogger(__name__)

RECENT_LOGS_DEFAULT = 20
RECENT_LOGS_MAX = 100


class AccessLogViewSet(mixins.ListModelMixin,
                       mixins.CreateModelMixin,
                       viewsets.GenericViewSet):
    queryset = AccessLog.objects.select_related('person', 'recorded_by').all()
    serializer_class = AccessLogSerializer
    permission_classes = [IsConfirmedUser]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['person', 'direction', 'location']

    def get_serializer_class(self):
        if self.action == 'create':
            return AccessLogCreateSerializer
        return AccessLogSerializer

    def create(self, request, *args, **kwargs):
        """Record an entry or exit at the operator's gate"""
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        log = serializer.save(recorded_by=request.user)
        logger.info(f"{log.direction} logged for {log.person.full_name} at {log.location} by {request.user}")
        return Response(AccessLogSerializer(log).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def recent(self, request):
        """Latest movements for the live feed"""
        try:
            limit = int(request.query_params.get('limit', RECENT_LOGS_DEFAULT))
        except ValueError:
            return Response({'error': 'limit must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        limit = max(1, min(limit, RECENT_LOGS_MAX))

        logs = self.get_queryset()[:limit]
        return Response(AccessLogSerializer(logs, many=True).data)

    @action(detail=False, methods=['get'])
    def analytics(self, request):
        """Parents currently on campus and today's parent entries/exits"""
        today = timezone.localdate()
        parent_logs = AccessLog.objects.filter(person__category=Person.PARENT, created_at__date=today)

        latest_direction = (
            AccessLog.objects.filter(person=OuterRef('pk'))
            .order_by('-created_at', '-id')
            .values('direction')[:1]
        )
        on_campus = (
            Person.objects.filter(category=Person.PARENT)
            .annotate(last_direction=Subquery(latest_direction))
            .filter(last_direction=AccessLog.ENTRY)
            .count()
        )

        data = {
            'on_campus': on_campus,
            'entries_today': parent_logs.filter(direction=AccessLog.ENTRY).count(),
            'exits_today': parent_logs.filter(direction=AccessLog.EXIT).count(),
        }
        serializer = AccessAnalyticsSerializer(data)
        return Response(serializer.data)
