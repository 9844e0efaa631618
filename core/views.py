import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.http import JsonResponse
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.events import log_event
from core.exceptions import Conflict
from core.models import Aircraft, AircraftEvent, AircraftSubscription, PRIVILEGE_ADMIN, PRIVILEGE_PENDING
from core.permissions import IsAdmin, IsApprovedUser
from core.serializers import (
    AircraftSerializer, AircraftCreateSerializer, AircraftEventSerializer,
    UserSerializer, UserUpdateSerializer, UserPrivilegesSerializer,
)
from maintenance.services import calculate_maintenance_status

logger = logging.getLogger(__name__)


User = get_user_model()


class AircraftViewSet(viewsets.ModelViewSet):
    queryset = Aircraft.objects.all().order_by('tail_number')
    serializer_class = AircraftSerializer

    def get_permissions(self):
        if self.action in ('create', 'update', 'partial_update', 'destroy'):
            return [IsAuthenticated(), IsApprovedUser(), IsAdmin()]
        return [IsAuthenticated(), IsApprovedUser()]

    def get_serializer_class(self):
        if self.action == 'create':
            return AircraftCreateSerializer
        return AircraftSerializer

    def _check_tail_number(self, tail_number, exclude_pk=None):
        qs = Aircraft.objects.filter(tail_number__iexact=tail_number)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            if exclude_pk is None:
                raise Conflict('Tail number already exists')
            raise Conflict('Tail number already in use by another aircraft')

    def perform_create(self, serializer):
        self._check_tail_number(serializer.validated_data['tail_number'])
        try:
            with transaction.atomic():
                aircraft = serializer.save()
        except IntegrityError:
            raise Conflict('Tail number already exists')
        log_event(aircraft, 'aircraft', 'Aircraft created', user=self.request.user,
                  notes=f"Initial Hobbs: {aircraft.last_hobbs}")

    def perform_update(self, serializer):
        tail_number = serializer.validated_data.get('tail_number')
        if tail_number:
            self._check_tail_number(tail_number, exclude_pk=serializer.instance.pk)
        try:
            with transaction.atomic():
                aircraft = serializer.save()
        except IntegrityError:
            raise Conflict('Tail number already in use by another aircraft')
        log_event(aircraft, 'aircraft', 'Aircraft updated', user=self.request.user)

    def perform_destroy(self, instance):
        # Reservations, issues, subscriptions and events cascade
        logger.info("Deleting aircraft %s (%s)", instance.tail_number, instance.pk)
        instance.delete()

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Aircraft deleted'}, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get'])
    def maintenance_status(self, request, pk=None):
        """
        Grounding state derived from unresolved issues
        GET /api/aircraft/{id}/maintenance_status/
        """
        aircraft = self.get_object()
        return Response(calculate_maintenance_status(aircraft).to_dict())

    @action(detail=True, methods=['get'])
    def events(self, request, pk=None):
        """
        Audit trail for an aircraft
        GET /api/aircraft/{id}/events/?limit=50
        """
        aircraft = self.get_object()
        try:
            limit = min(int(request.query_params.get('limit', 50)), 500)
        except ValueError:
            raise ValidationError({'limit': ['A valid integer is required.']})
        events = aircraft.events.select_related('user')[:limit]
        return Response({
            'events': AircraftEventSerializer(events, many=True, context={'request': request}).data,
        })


class AircraftEventViewSet(viewsets.ReadOnlyModelViewSet):

    class _Pagination(PageNumberPagination):
        page_size = 50

    queryset = AircraftEvent.objects.select_related('aircraft', 'user').order_by('-timestamp')
    serializer_class = AircraftEventSerializer
    pagination_class = _Pagination
    permission_classes = [IsAuthenticated, IsApprovedUser]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['aircraft', 'category']


class UserViewSet(viewsets.ModelViewSet):
    """Account administration (admin only)."""
    queryset = User.objects.all().order_by('username')
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated, IsApprovedUser, IsAdmin]

    def get_serializer_class(self):
        if self.action == 'update':
            return UserUpdateSerializer
        if self.action == 'partial_update':
            return UserPrivilegesSerializer
        return UserSerializer

    def _check_unique(self, validated_data, exclude_pk=None):
        username = validated_data.get('username')
        email = validated_data.get('email')
        qs = User.objects.none()
        if username:
            qs = qs | User.objects.filter(username__iexact=username)
        if email:
            qs = qs | User.objects.filter(email__iexact=email)
        if exclude_pk is not None:
            qs = qs.exclude(pk=exclude_pk)
        if qs.exists():
            raise Conflict('Username or email already in use')

    def _check_own_privileges(self, instance, validated_data):
        privileges = validated_data.get('privileges')
        if instance.pk == self.request.user.pk and privileges and privileges != PRIVILEGE_ADMIN:
            raise ValidationError({'privileges': ['Cannot change your own privileges']})

    def perform_create(self, serializer):
        self._check_unique(serializer.validated_data)
        try:
            with transaction.atomic():
                user = serializer.save()
        except IntegrityError:
            raise Conflict('Username or email already in use')
        logger.info("User %s created with privileges %s by %s", user.username, user.privileges, self.request.user)

    def perform_update(self, serializer):
        self._check_own_privileges(serializer.instance, serializer.validated_data)
        self._check_unique(serializer.validated_data, exclude_pk=serializer.instance.pk)
        try:
            with transaction.atomic():
                user = serializer.save()
        except IntegrityError:
            raise Conflict('Username or email already in use')
        logger.info("User %s updated by %s", user.username, self.request.user)

    def perform_destroy(self, instance):
        if instance.pk == self.request.user.pk:
            raise ValidationError({'non_field_errors': ['Cannot delete your own account']})
        logger.info("User %s deleted by %s", instance.username, self.request.user)
        instance.delete()

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'User deleted'}, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'])
    def pending(self, request):
        """Accounts awaiting approval, oldest first."""
        users = User.objects.filter(privileges=PRIVILEGE_PENDING, is_superuser=False).order_by('date_joined')
        return Response(UserSerializer(users, many=True, context={'request': request}).data)


class SubscriptionListView(APIView):
    """GET /api/subscriptions/ - aircraft ids the current user follows."""
    permission_classes = [IsAuthenticated, IsApprovedUser]

    def get(self, request):
        ids = AircraftSubscription.objects.filter(user=request.user).values_list('aircraft_id', flat=True)
        return Response([str(aircraft_id) for aircraft_id in ids])


class SubscriptionDetailView(APIView):
    """POST/DELETE /api/subscriptions/{aircraft_id}/ - follow or unfollow an aircraft."""
    permission_classes = [IsAuthenticated, IsApprovedUser]

    def post(self, request, aircraft_id):
        aircraft = Aircraft.objects.filter(pk=aircraft_id).first()
        if aircraft is None:
            raise NotFound('Aircraft not found')
        AircraftSubscription.objects.get_or_create(user=request.user, aircraft=aircraft)
        return Response({'subscribed': True, 'aircraft_id': str(aircraft.pk)})

    def delete(self, request, aircraft_id):
        AircraftSubscription.objects.filter(user=request.user, aircraft_id=aircraft_id).delete()
        return Response({'subscribed': False, 'aircraft_id': str(aircraft_id)})


def healthz(request):
    return JsonResponse({"status": "ok"})
