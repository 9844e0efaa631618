from rest_framework import serializers

from core.models import Aircraft
from .models import Issue, ISSUE_SEVERITIES, ISSUE_STATUSES


class IssueSerializer(serializers.ModelSerializer):
    aircraft_id = serializers.PrimaryKeyRelatedField(source='aircraft', queryset=Aircraft.objects.all(), pk_field=serializers.UUIDField(), error_messages={
        'required': 'Aircraft is required',
        'null': 'Aircraft is required',
        'does_not_exist': 'Aircraft not found',
        'incorrect_type': 'Aircraft is required',
    })
    tail_number = serializers.CharField(source='aircraft.tail_number', read_only=True)
    reported_by_name = serializers.CharField(source='reported_by.username', read_only=True, default=None)
    title = serializers.CharField(max_length=254, trim_whitespace=True, error_messages={
        'required': 'Title is required',
        'blank': 'Title is required',
    })
    severity = serializers.ChoiceField(choices=ISSUE_SEVERITIES, error_messages={
        'invalid_choice': 'Invalid severity',
    })

    class Meta:
        model = Issue
        fields = [
            'id',
            'aircraft_id',
            'tail_number',
            'reported_by',
            'reported_by_name',
            'title',
            'description',
            'severity',
            'status',
            'created_at',
            'resolved_at',
        ]
        read_only_fields = ['id', 'reported_by', 'status', 'created_at', 'resolved_at']
        extra_kwargs = {'description': {'required': False, 'allow_null': True}}

    def validate_description(self, value):
        return value or ''


class IssueStatusSerializer(serializers.ModelSerializer):
    """Status-only update; resolved_at follows the target status."""
    status = serializers.ChoiceField(choices=ISSUE_STATUSES, error_messages={
        'invalid_choice': 'Invalid status',
        'required': 'Invalid status',
    })

    class Meta:
        model = Issue
        fields = ['id', 'status', 'resolved_at']
        read_only_fields = ['id', 'resolved_at']

    def update(self, instance, validated_data):
        instance.set_status(validated_data['status'])
        instance.save(update_fields=['status', 'resolved_at'])
        return instance
