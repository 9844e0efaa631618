from rest_framework import serializers

from core.permissions import can_perform_reservation_action
from .models import HOBBS_MAX, Reservation, RESERVATION_TYPES, quantize_hobbs


class ReservationSerializer(serializers.ModelSerializer):
    """Read representation with aircraft and owner display fields."""
    aircraft_id = serializers.UUIDField(read_only=True)
    tail_number = serializers.CharField(source='aircraft.tail_number', read_only=True)
    make = serializers.CharField(source='aircraft.make', read_only=True)
    model = serializers.CharField(source='aircraft.model', read_only=True)
    user_id = serializers.IntegerField(read_only=True)
    username = serializers.CharField(source='user.username', read_only=True)
    hobbs_used = serializers.DecimalField(max_digits=8, decimal_places=1, read_only=True)
    is_completed = serializers.BooleanField(read_only=True)
    allowed_actions = serializers.SerializerMethodField()

    class Meta:
        model = Reservation
        fields = [
            'id',
            'aircraft_id',
            'tail_number',
            'make',
            'model',
            'user_id',
            'username',
            'title',
            'start_time',
            'end_time',
            'notes',
            'start_hobbs',
            'end_hobbs',
            'hobbs_used',
            'completed_at',
            'is_completed',
            'created_at',
            'allowed_actions',
        ]
        read_only_fields = fields

    action_operations = (
        ('edit', 'update'),
        ('complete', 'complete'),
        ('delete', 'destroy'),
    )

    def get_allowed_actions(self, obj):
        request = self.context.get('request')
        if request is None:
            return []
        return [
            name for name, operation in self.action_operations
            if can_perform_reservation_action(request.user, obj, operation)
        ]


class ReservationWriteSerializer(serializers.Serializer):
    """Input shape for create and edit; reports every bad field at once."""
    aircraft_id = serializers.UUIDField(error_messages={
        'required': 'Aircraft is required',
        'null': 'Aircraft is required',
        'invalid': 'Aircraft is required',
    })
    title = serializers.ChoiceField(choices=RESERVATION_TYPES, error_messages={
        'invalid_choice': 'Type must be Personal, Shared, or Maintenance',
    })
    start_time = serializers.DateTimeField(error_messages={
        'required': 'Valid start time required',
        'invalid': 'Valid start time required',
        'null': 'Valid start time required',
    })
    end_time = serializers.DateTimeField(error_messages={
        'required': 'Valid end time required',
        'invalid': 'Valid end time required',
        'null': 'Valid end time required',
    })
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')

    def validate(self, attrs):
        if attrs['end_time'] <= attrs['start_time']:
            raise serializers.ValidationError({'end_time': 'End time must be after start time'})
        attrs['notes'] = attrs.get('notes') or ''
        return attrs


class ReservationCompleteSerializer(serializers.Serializer):
    """Readings are rounded to the meter's tenths before comparison."""
    start_hobbs = serializers.DecimalField(max_digits=None, decimal_places=None, min_value=0, max_value=HOBBS_MAX)
    end_hobbs = serializers.DecimalField(max_digits=None, decimal_places=None, min_value=0, max_value=HOBBS_MAX)

    def validate_start_hobbs(self, value):
        return quantize_hobbs(value)

    def validate_end_hobbs(self, value):
        return quantize_hobbs(value)

    def validate(self, attrs):
        if attrs['end_hobbs'] < attrs['start_hobbs']:
            raise serializers.ValidationError({'end_hobbs': 'Hobbs end must be >= Hobbs start'})
        return attrs


class UsageReportQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField(error_messages={'required': 'Start and end dates are required'})
    end = serializers.DateTimeField(error_messages={'required': 'Start and end dates are required'})
    aircraft_id = serializers.UUIDField(required=False)
