from rest_framework import serializers
from people.models import Person
from people.serializers import PersonSummarySerializer
from .models import AccessLog


class AccessLogSerializer(serializers.ModelSerializer):
    person = PersonSummarySerializer(read_only=True)
    recorder = serializers.SerializerMethodField()

    class Meta:
        model = AccessLog
        fields = ['id', 'person', 'direction', 'location', 'recorder', 'created_at']

    def get_recorder(self, obj):
        if obj.recorded_by:
            return {'id': obj.recorded_by.id, 'email': obj.recorded_by.email or obj.recorded_by.username}
        return None


class AccessLogCreateSerializer(serializers.ModelSerializer):
    personId = serializers.PrimaryKeyRelatedField(source='person', queryset=Person.objects.all())
    location = serializers.CharField(max_length=100, required=False, allow_blank=True)

    class Meta:
        model = AccessLog
        fields = ['personId', 'direction', 'location']

    def validate(self, data):
        location = (data.get('location') or '').strip()
        if not location:
            # Fall back to the gate chosen for this session
            request = self.context.get('request')
            location = getattr(request, 'gate_location', None) or ''
        if not location:
            raise serializers.ValidationError(
                {'location': 'Your location is not set. Select your gate or post before logging.'}
            )
        data['location'] = location
        return data


class AccessAnalyticsSerializer(serializers.Serializer):
    """Serializer for the live gate dashboard counters"""
    on_campus = serializers.IntegerField()
    entries_today = serializers.IntegerField()
    exits_today = serializers.IntegerField()
