import csv

import django_filters
from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.permissions import USAGE_REPORT_ACTORS, IsApprovedUser, actor_tags
from reservations import services
from reservations.models import Reservation
from reservations.serializers import (
    ReservationSerializer, ReservationWriteSerializer, ReservationCompleteSerializer,
    UsageReportQuerySerializer,
)

USAGE_REPORT_HEADERS = [
    'ID', 'Tail Number', 'User', 'Type', 'Start', 'End',
    'Hobbs Start', 'Hobbs End', 'Hobbs Used', 'Completed', 'Notes',
]


class ReservationFilter(django_filters.FilterSet):
    aircraft_id = django_filters.UUIDFilter(field_name='aircraft_id')
    # Calendar window: anything ending after `start` and starting before `end`
    start = django_filters.IsoDateTimeFilter(field_name='end_time', lookup_expr='gte')
    end = django_filters.IsoDateTimeFilter(field_name='start_time', lookup_expr='lte')
    completed = django_filters.BooleanFilter(field_name='completed_at', lookup_expr='isnull', exclude=True)

    class Meta:
        model = Reservation
        fields = ['aircraft_id', 'title']


class ReservationViewSet(viewsets.ModelViewSet):
    """
    GET    /api/reservations/                 calendar listing
    POST   /api/reservations/                 book a time slot
    PUT    /api/reservations/{id}/            edit (owner or admin, not completed)
    DELETE /api/reservations/{id}/            delete (owner or admin)
    POST   /api/reservations/{id}/complete/   record Hobbs and close
    GET    /api/reservations/usage/           CSV usage report
    """
    queryset = Reservation.objects.select_related('aircraft', 'user').order_by('start_time')
    serializer_class = ReservationSerializer
    permission_classes = [IsAuthenticated, IsApprovedUser]
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']
    lookup_value_regex = '[0-9a-fA-F-]{36}'
    filter_backends = [DjangoFilterBackend]
    filterset_class = ReservationFilter

    def create(self, request, *args, **kwargs):
        serializer = ReservationWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = services.create_reservation(request.user, **serializer.validated_data)
        return Response(
            ReservationSerializer(reservation, context={'request': request}).data,
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, *args, **kwargs):
        serializer = ReservationWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = services.update_reservation(request.user, kwargs['pk'], **serializer.validated_data)
        return Response(ReservationSerializer(reservation, context={'request': request}).data)

    def destroy(self, request, *args, **kwargs):
        services.delete_reservation(request.user, kwargs['pk'])
        return Response({'message': 'Reservation deleted'}, status=status.HTTP_200_OK)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """
        Complete a reservation and advance the aircraft Hobbs meter
        POST /api/reservations/{id}/complete/

        Body: {
            "start_hobbs": 100.0,
            "end_hobbs": 102.5
        }
        """
        serializer = ReservationCompleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reservation = services.complete_reservation(request.user, pk, **serializer.validated_data)
        return Response({
            'message': 'Reservation completed',
            'start_hobbs': reservation.start_hobbs,
            'end_hobbs': reservation.end_hobbs,
            'reservation': ReservationSerializer(reservation, context={'request': request}).data,
            'aircraft_last_hobbs': reservation.aircraft.last_hobbs,
        })

    @action(detail=False, methods=['get'])
    def usage(self, request):
        """
        Completed-reservation usage as CSV (admin or maintainer)
        GET /api/reservations/usage/?start=...&end=...&aircraft_id=...
        """
        if not actor_tags(request.user) & USAGE_REPORT_ACTORS:
            raise PermissionDenied('Not authorized')
        query = UsageReportQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        rows = services.completed_usage(
            query.validated_data['start'],
            query.validated_data['end'],
            aircraft_id=query.validated_data.get('aircraft_id'),
        )

        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = 'attachment; filename="usage-report.csv"'
        writer = csv.writer(response)
        writer.writerow(USAGE_REPORT_HEADERS)
        for r in rows:
            writer.writerow([
                r.id,
                r.aircraft.tail_number,
                r.user.username,
                r.title,
                r.start_time.isoformat(),
                r.end_time.isoformat(),
                r.start_hobbs if r.start_hobbs is not None else '',
                r.end_hobbs if r.end_hobbs is not None else '',
                r.hobbs_used if r.hobbs_used is not None else '',
                r.completed_at.isoformat(),
                r.notes,
            ])
        return response
