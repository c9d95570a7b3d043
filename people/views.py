import logging

from django.db import transaction
from django.db.models import Q
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from users.permissions import RolePermission
from . import bio_service
from .exceptions import InvalidPayload, PersistenceFailure
from .importer import ProfileImporter
from .models import Person
from .serializers import (
    PersonSerializer,
    PersonSummarySerializer,
    GenerateBioSerializer,
    parse_submissions,
)

logger = logging.getLogger(__name__)


class PeoplePagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 200

    def get_paginated_response(self, data):
        return Response({
            'people': data,
            'total': self.page.paginator.count,
        })


class PersonViewSet(viewsets.ModelViewSet):
    queryset = Person.objects.all()
    serializer_class = PersonSerializer
    permission_classes = [RolePermission]
    pagination_class = PeoplePagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['category']
    search_fields = ['first_name', 'last_name', 'external_roster_id']

    def create(self, request, *args, **kwargs):
        """Create a batch of profiles, linking students to guardians created in the same batch"""
        try:
            submissions = parse_submissions(request.data)
            result = ProfileImporter().run(submissions)
        except InvalidPayload as e:
            return Response(e.as_response_data(), status=status.HTTP_400_BAD_REQUEST)
        except PersistenceFailure as e:
            return Response(e.as_response_data(), status=status.HTTP_500_INTERNAL_SERVER_ERROR)

        return Response({
            'success': True,
            'ids': result.ids,
            'warnings': result.warnings,
        }, status=status.HTTP_201_CREATED)

    def perform_update(self, serializer):
        person = serializer.save()
        logger.info(f"Profile {person.id} updated by {self.request.user}")

    def perform_destroy(self, instance):
        person_id = instance.id
        with transaction.atomic():
            # Unlink the profile from any student that lists it as guardian
            students = Person.objects.select_for_update().filter(category=Person.STUDENT).only('id', 'guardian_ids')
            for student in students:
                if person_id in (student.guardian_ids or []):
                    student.guardian_ids = [gid for gid in student.guardian_ids if gid != person_id]
                    Person.objects.filter(pk=student.pk).update(guardian_ids=student.guardian_ids)
            instance.delete()
        logger.info(f"Profile {person_id} deleted by {self.request.user}")

    @action(detail=False, methods=['get'])
    def associates(self, request):
        """Search staff and guardians that can be linked to a student"""
        term = (request.query_params.get('search') or '').strip()
        if len(term) < 2:
            return Response([])

        people = Person.objects.filter(category__in=Person.GUARDIAN_CATEGORIES).filter(
            Q(first_name__icontains=term) | Q(last_name__icontains=term)
        )[:10]
        serializer = PersonSummarySerializer(people, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['post'], url_path='generate-bio')
    def generate_bio(self, request):
        """Generate a bio preview for the profile form"""
        serializer = GenerateBioSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'error': 'Missing required fields for bio generation.', 'details': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        data = serializer.validated_data
        result = bio_service.generate_bio(data['firstName'], data['lastName'], data['category'], data['roleOrClass'])
        return Response({'bio': result.value, 'fallback': result.fallback})
