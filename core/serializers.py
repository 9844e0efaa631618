from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Aircraft, AircraftEvent, PRIVILEGE_LEVELS
from maintenance.services import calculate_maintenance_status

User = get_user_model()


class MaintenanceStatusMixin:
    def get_grounded(self, obj):
        return self._maintenance_status(obj).grounded

    def get_open_issue_count(self, obj):
        return self._maintenance_status(obj).open_issue_count

    def _maintenance_status(self, obj):
        cache = self.context.setdefault('_maintenance_status', {})
        if obj.pk not in cache:
            cache[obj.pk] = calculate_maintenance_status(obj)
        return cache[obj.pk]


class AircraftSerializer(MaintenanceStatusMixin, serializers.ModelSerializer):
    grounded = serializers.SerializerMethodField()
    open_issue_count = serializers.SerializerMethodField()

    class Meta:
        model = Aircraft
        fields = [
                'id',
                'tail_number',
                'make',
                'model',
                'year',
                'last_hobbs',
                'added',
                'grounded',
                'open_issue_count',
                ]
        read_only_fields = ['id', 'last_hobbs', 'added']
        # Uniqueness is reported as 409 by the viewset, not as a 400 field error
        extra_kwargs = {'tail_number': {'validators': []}}

    def validate_tail_number(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError('Tail number is required')
        return value

    def validate_make(self, value):
        if not value.strip():
            raise serializers.ValidationError('Make is required')
        return value.strip()

    def validate_model(self, value):
        if not value.strip():
            raise serializers.ValidationError('Model is required')
        return value.strip()


class AircraftCreateSerializer(AircraftSerializer):
    """Initial meter reading may be set once, at registration."""

    class Meta(AircraftSerializer.Meta):
        read_only_fields = ['id', 'added']
        extra_kwargs = {'tail_number': {'validators': []}}


class AircraftEventSerializer(serializers.ModelSerializer):
    user_display = serializers.SerializerMethodField()

    class Meta:
        model = AircraftEvent
        fields = [
                'id',
                'aircraft',
                'timestamp',
                'category',
                'event_name',
                'notes',
                'user_display',
                ]

    def get_user_display(self, obj):
        if not obj.user:
            return None
        return obj.user.display_name


class UserSerializer(serializers.ModelSerializer):
    username = serializers.CharField(min_length=3, max_length=50, error_messages={
        'min_length': 'Username must be 3-50 characters',
        'max_length': 'Username must be 3-50 characters',
    })
    email = serializers.EmailField(error_messages={'invalid': 'Valid email is required'})
    privileges = serializers.ChoiceField(choices=PRIVILEGE_LEVELS, error_messages={
        'invalid_choice': 'Invalid privilege level',
    })
    password = serializers.CharField(write_only=True, min_length=6, style={'input_type': 'password'},
                                     error_messages={'min_length': 'Password must be at least 6 characters'})

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'privileges', 'password', 'date_joined']
        read_only_fields = ['id', 'date_joined']

    def validate_username(self, value):
        return value.strip()

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class UserUpdateSerializer(UserSerializer):
    """Full edit; the password is only changed when supplied."""
    password = serializers.CharField(write_only=True, min_length=6, required=False, allow_blank=True,
                                     allow_null=True, style={'input_type': 'password'},
                                     error_messages={'min_length': 'Password must be at least 6 characters'})

    def validate_password(self, value):
        return value or None


class UserPrivilegesSerializer(serializers.ModelSerializer):
    privileges = serializers.ChoiceField(choices=PRIVILEGE_LEVELS, error_messages={
        'invalid_choice': 'Invalid privilege level',
    })

    class Meta:
        model = User
        fields = ['id', 'privileges']
        read_only_fields = ['id']
