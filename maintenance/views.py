import django_filters
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.mixins import EventLoggingMixin
from core.permissions import HasIssuePrivilege, IsApprovedUser
from maintenance.models import Issue
from maintenance.serializers import IssueSerializer, IssueStatusSerializer


class IssueFilter(django_filters.FilterSet):
    aircraft_id = django_filters.UUIDFilter(field_name='aircraft_id')

    class Meta:
        model = Issue
        fields = ['aircraft_id', 'status', 'severity']


class IssueViewSet(EventLoggingMixin, viewsets.ModelViewSet):
    queryset = Issue.objects.select_related('aircraft', 'reported_by').order_by('-created_at')
    serializer_class = IssueSerializer
    permission_classes = [IsAuthenticated, IsApprovedUser, HasIssuePrivilege]
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']
    event_category = 'issue'
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_class = IssueFilter
    search_fields = ['title', 'description']

    def get_serializer_class(self):
        if self.action == 'partial_update':
            return IssueStatusSerializer
        return IssueSerializer

    def _event_notes(self, instance):
        return f"{instance.title} [{instance.severity}, {instance.status}]"

    def _save_kwargs(self):
        return {'reported_by': self.request.user}

    def _event_name(self, verb, instance):
        if verb == 'created':
            return f"Issue reported: {instance.get_severity_display()}"
        if verb == 'updated':
            return f"Issue {instance.get_status_display().lower()}"
        return super()._event_name(verb, instance)

    def partial_update(self, request, *args, **kwargs):
        issue = self.get_object()
        serializer = IssueStatusSerializer(issue, data=request.data)
        serializer.is_valid(raise_exception=True)
        self.perform_update(serializer)
        return Response(IssueSerializer(issue, context={'request': request}).data, status=status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        super().destroy(request, *args, **kwargs)
        return Response({'message': 'Issue deleted'}, status=status.HTTP_200_OK)
