from django.conf import settings
from django.db import models
from django.utils import timezone

from core import models as core_models

import uuid


SEVERITY_LOW = 'low'
SEVERITY_MEDIUM = 'medium'
SEVERITY_HIGH = 'high'
SEVERITY_GROUNDING = 'grounding'

ISSUE_SEVERITIES = (
        (SEVERITY_LOW, 'Low'),
        (SEVERITY_MEDIUM, 'Medium'),
        (SEVERITY_HIGH, 'High'),
        (SEVERITY_GROUNDING, 'Grounding'),
)

STATUS_OPEN = 'open'
STATUS_IN_PROGRESS = 'in_progress'
STATUS_RESOLVED = 'resolved'

ISSUE_STATUSES = (
        (STATUS_OPEN, 'Open'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_RESOLVED, 'Resolved'),
)


class Issue(models.Model):
    id = models.UUIDField(primary_key=True, blank=False, default=uuid.uuid4, editable=False)
    aircraft = models.ForeignKey(core_models.Aircraft, related_name='issues', on_delete=models.CASCADE)
    reported_by = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='reported_issues', blank=True, null=True, on_delete=models.SET_NULL)
    title = models.CharField(max_length=254)
    description = models.TextField(blank=True)
    severity = models.CharField(max_length=20, choices=ISSUE_SEVERITIES)
    status = models.CharField(max_length=20, choices=ISSUE_STATUSES, default=STATUS_OPEN)
    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.aircraft.tail_number} - {self.title} ({self.get_status_display()})"

    def set_status(self, status):
        """Move to ``status``.  Every resolve stamps resolved_at afresh, even
        when the issue was already resolved; any other status clears it."""
        if status == STATUS_RESOLVED:
            self.resolved_at = timezone.now()
        else:
            self.resolved_at = None
        self.status = status
