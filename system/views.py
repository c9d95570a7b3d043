import logging

from django.db import DatabaseError, connection
from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from people.bio_service import BioGenerator
from people.models import Person
from people.roster_service import configured_sheet_id
from people.serializers import PersonSummarySerializer
from users.permissions import IsAdminRole, IsConfirmedUser
from .maintenance import verify_and_repair_people
from .models import Setting
from .serializers import SettingUpdateSerializer

logger = logging.getLogger(__name__)


def _success(message, data=None):
    result = {'status': 'Success', 'message': message}
    if data is not None:
        result['data'] = data
    return result


def _failure(message, error):
    return {'status': 'Failed', 'message': message, 'error': {'message': str(error)}}


def check_database():
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
        return _success(f"Connected to the {connection.vendor} database.")
    except DatabaseError as e:
        logger.error(f"Database connectivity check failed: {e}")
        return _failure('Could not reach the database.', e)


@api_view(['GET', 'PUT'])
@permission_classes([IsConfirmedUser])
def settings_view(request):
    """
    GET: all settings as a key/value object
    PUT: update one setting (admin only)
    """
    if request.method == 'GET':
        return Response(Setting.as_dict())

    if not IsAdminRole().has_permission(request, None):
        return Response({'error': 'Administrator access required.'}, status=status.HTTP_403_FORBIDDEN)

    serializer = SettingUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'key and value are required', 'details': serializer.errors},
                        status=status.HTTP_400_BAD_REQUEST)

    key = serializer.validated_data['key']
    Setting.objects.update_or_create(key=key, defaults={'value': serializer.validated_data['value']})
    logger.info(f"Setting '{key}' updated by {request.user}")
    return Response({'success': True})


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def public_diagnostics(request):
    """Lightweight health check usable before login"""
    return Response({
        'apiStatus': _success('API server is responsive.'),
        'databaseConnection': check_database(),
    })


@api_view(['GET'])
@permission_classes([IsAdminRole])
def admin_diagnostics(request):
    """System checks for the admin dashboard"""
    results = {'databaseConnection': check_database()}

    try:
        results['settingsFetch'] = _success('Settings loaded.', Setting.as_dict())
    except DatabaseError as e:
        results['settingsFetch'] = _failure('Failed to read settings.', e)

    try:
        sample = Person.objects.first()
        data = PersonSummarySerializer(sample).data if sample else None
        results['sampleProfileFetch'] = _success(
            'Sample profile loaded.' if sample else 'No profiles yet.', data
        )
    except DatabaseError as e:
        results['sampleProfileFetch'] = _failure('Failed to read profiles.', e)

    try:
        sheet_id = configured_sheet_id()
    except DatabaseError as e:
        sheet_id = ''
        logger.warning(f"Could not resolve roster sheet id: {e}")
    results['rosterLookup'] = {
        'status': 'Success' if sheet_id else 'Warning',
        'message': 'Roster sheet configured.' if sheet_id else 'No roster sheet configured; roster ids will be generated.',
    }

    generator = BioGenerator()
    results['bioGenerator'] = {
        'status': 'Success' if generator.enabled else 'Warning',
        'message': (f"Using provider '{generator.provider}'." if generator.enabled
                    else 'Bio generation is disabled; the default bio will be used.'),
    }
    return Response(results)


@api_view(['POST'])
@permission_classes([IsAdminRole])
def verify_and_repair(request):
    """Verify profile integrity and repair broken links"""
    try:
        report = verify_and_repair_people()
    except DatabaseError as e:
        logger.exception('Profile integrity repair failed')
        return Response({'error': 'Database verification failed', 'details': str(e)},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'success': True, 'report': report})
