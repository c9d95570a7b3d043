import base64
import binascii
import io

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from PIL import Image, UnidentifiedImageError
from rest_framework import serializers

from .exceptions import InvalidPayload
from .models import Person
from .submissions import StaffSubmission, GuardianSubmission, StudentSubmission


def validate_image_reference(value):
    """Accept an http(s) URL or a base64 image data URI that Pillow can read"""
    value = (value or '').strip()
    if not value:
        raise serializers.ValidationError('A photo is required.')

    if value.startswith('data:'):
        header, _, encoded = value.partition(',')
        if not header.startswith('data:image/') or ';base64' not in header:
            raise serializers.ValidationError('Image data must be a base64 encoded image data URI.')
        try:
            raw = base64.b64decode(encoded, validate=True)
            Image.open(io.BytesIO(raw)).verify()
        except (binascii.Error, ValueError, UnidentifiedImageError, OSError):
            raise serializers.ValidationError('Image data could not be read as an image.')
        return value

    try:
        URLValidator(schemes=['http', 'https'])(value)
    except DjangoValidationError:
        raise serializers.ValidationError('Image must be an http(s) URL or an image data URI.')
    return value


def validate_guardian_references(guardian_ids, exclude_id=None):
    """Every id must belong to an existing Staff or Parent/Guardian profile"""
    if not guardian_ids:
        return []
    found = set(
        Person.objects.filter(id__in=guardian_ids, category__in=Person.GUARDIAN_CATEGORIES)
        .values_list('id', flat=True)
    )
    invalid = [gid for gid in guardian_ids if gid not in found or gid == exclude_id]
    if invalid:
        raise serializers.ValidationError(
            f"These ids are not existing staff or guardian profiles: {', '.join(str(i) for i in invalid)}"
        )
    # Keep first-seen order, drop duplicates
    return list(dict.fromkeys(guardian_ids))


# ---- Submission serializers (one per category) ----
class BaseSubmissionSerializer(serializers.Serializer):
    tempId = serializers.CharField(source='temp_id', max_length=64)
    category = serializers.ChoiceField(choices=Person.CATEGORY_CHOICES)
    firstName = serializers.CharField(source='first_name', max_length=50)
    lastName = serializers.CharField(source='last_name', max_length=50)
    image = serializers.CharField(validators=[validate_image_reference])

    submission_class = None  # override in subclasses

    def validate_category(self, value):
        if value != self.submission_class.category:
            raise serializers.ValidationError(f"Expected category '{self.submission_class.category}'.")
        return value

    def to_submission(self):
        data = dict(self.validated_data)
        data.pop('category', None)
        return self.submission_class(**data)


class StaffSubmissionSerializer(BaseSubmissionSerializer):
    role = serializers.CharField(max_length=50)

    submission_class = StaffSubmission


class GuardianSubmissionSerializer(BaseSubmissionSerializer):
    role = serializers.CharField(max_length=50, required=False, allow_blank=True, default='Parent/Guardian')

    submission_class = GuardianSubmission

    def validate_role(self, value):
        return value or 'Parent/Guardian'


class StudentSubmissionSerializer(BaseSubmissionSerializer):
    guardianIds = serializers.ListField(
        source='guardian_ids', child=serializers.IntegerField(min_value=1), required=False, default=list
    )
    guardianTempIds = serializers.ListField(
        source='guardian_temp_ids', child=serializers.CharField(max_length=64), required=False, default=list
    )

    submission_class = StudentSubmission

    def get_fields(self):
        # 'class' is a keyword, so it cannot be declared as an attribute
        fields = super().get_fields()
        fields['class'] = serializers.CharField(source='class_name', max_length=50)
        return fields

    def validate_guardianIds(self, value):
        return validate_guardian_references(value)

    def validate(self, data):
        if not data.get('guardian_ids') and not data.get('guardian_temp_ids'):
            raise serializers.ValidationError(
                {'guardianIds': 'A student must have at least one existing or new guardian associated.'}
            )
        # Duplicate temp references collapse to one
        data['guardian_temp_ids'] = list(dict.fromkeys(data.get('guardian_temp_ids', [])))
        return data


SUBMISSION_SERIALIZERS = {
    Person.STAFF: StaffSubmissionSerializer,
    Person.PARENT: GuardianSubmissionSerializer,
    Person.STUDENT: StudentSubmissionSerializer,
}


def parse_submissions(payload):
    """
    Validate a batch payload and return the submission variants in input order.
    Raises InvalidPayload with per-item errors keyed by position.
    """
    if not isinstance(payload, list) or not payload:
        raise InvalidPayload(detail='Expected a non-empty list of profiles.')

    submissions = []
    errors = {}
    seen_temp_ids = set()
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            errors[index] = {'non_field_errors': ['Each profile must be an object.']}
            continue

        serializer_class = SUBMISSION_SERIALIZERS.get(item.get('category'))
        if serializer_class is None:
            errors[index] = {'category': [f"Unknown category '{item.get('category')}'."]}
            continue

        serializer = serializer_class(data=item)
        if not serializer.is_valid():
            errors[index] = serializer.errors
            continue

        submission = serializer.to_submission()
        if submission.temp_id in seen_temp_ids:
            errors[index] = {'tempId': ['Duplicate tempId in this batch.']}
            continue
        seen_temp_ids.add(submission.temp_id)
        submissions.append(submission)

    if errors:
        raise InvalidPayload(detail=errors)
    return submissions


# ---- Profile serializers ----
class PersonSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name', max_length=50)
    lastName = serializers.CharField(source='last_name', max_length=50)
    image = serializers.CharField(validators=[validate_image_reference])
    role = serializers.CharField(max_length=50, required=False, allow_null=True, allow_blank=True)
    guardianIds = serializers.ListField(
        source='guardian_ids', child=serializers.IntegerField(min_value=1), required=False
    )
    externalRosterId = serializers.CharField(source='external_roster_id', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Person
        fields = ['id', 'category', 'firstName', 'lastName', 'image', 'role', 'guardianIds', 'bio', 'externalRosterId', 'createdAt']
        read_only_fields = ['id', 'category', 'bio']

    def get_fields(self):
        fields = super().get_fields()
        fields['class'] = serializers.CharField(
            source='class_name', max_length=50, required=False, allow_null=True, allow_blank=True
        )
        return fields

    def validate(self, data):
        instance = self.instance
        if instance is None:
            raise serializers.ValidationError('Profiles are created through the batch endpoint.')

        if instance.is_student:
            if 'guardian_ids' in data:
                try:
                    data['guardian_ids'] = validate_guardian_references(data['guardian_ids'], exclude_id=instance.id)
                except serializers.ValidationError as e:
                    raise serializers.ValidationError({'guardianIds': e.detail})
                if not data['guardian_ids']:
                    raise serializers.ValidationError({'guardianIds': 'A student must keep at least one guardian.'})
            if 'class_name' in data and not data['class_name']:
                raise serializers.ValidationError({'class': 'A student must have a class.'})
            data.pop('role', None)
        else:
            if data.get('guardian_ids'):
                raise serializers.ValidationError({'guardianIds': 'Only students can have guardians.'})
            if data.get('class_name'):
                raise serializers.ValidationError({'class': 'Only students have a class.'})
            if 'role' in data and not (data['role'] or '').strip():
                if instance.category == Person.STAFF:
                    raise serializers.ValidationError({'role': 'Staff must have a role.'})
                data['role'] = 'Parent/Guardian'
            data.pop('guardian_ids', None)
            data.pop('class_name', None)
        return data


class PersonSummarySerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name')
    lastName = serializers.CharField(source='last_name')

    class Meta:
        model = Person
        fields = ['id', 'category', 'firstName', 'lastName', 'image', 'role']


class GenerateBioSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=50)
    lastName = serializers.CharField(max_length=50)
    category = serializers.ChoiceField(choices=Person.CATEGORY_CHOICES)
    roleOrClass = serializers.CharField(max_length=50)
