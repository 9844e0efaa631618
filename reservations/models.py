from django.conf import settings
from django.db import models
from django.db.models import F, Q

from core import models as core_models

import uuid
from decimal import Decimal, ROUND_HALF_UP


RESERVATION_TYPES = (
        ('Personal', 'Personal'),
        ('Shared', 'Shared'),
        ('Maintenance', 'Maintenance'),
)

# Hobbs meters read in tenths of an hour; the columns hold 8 digits.
HOBBS_STEP = Decimal('0.1')
HOBBS_MAX = Decimal('9999999.9')


def quantize_hobbs(value):
    """Round a meter reading to the nearest tenth, halves away from zero."""
    return Decimal(value).quantize(HOBBS_STEP, rounding=ROUND_HALF_UP)


class ReservationQuerySet(models.QuerySet):

    def for_aircraft(self, aircraft_id):
        return self.filter(aircraft_id=aircraft_id)

    def overlapping(self, start_time, end_time):
        """Reservations whose [start_time, end_time) intersects the given range."""
        return self.filter(start_time__lt=end_time, end_time__gt=start_time)

    def completed(self):
        return self.filter(completed_at__isnull=False)


class Reservation(models.Model):
    id = models.UUIDField(primary_key=True, blank=False, default=uuid.uuid4, editable=False)
    aircraft = models.ForeignKey(core_models.Aircraft, related_name='reservations', on_delete=models.CASCADE)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='reservations', on_delete=models.CASCADE)
    # Category tag, not free text
    title = models.CharField(max_length=20, choices=RESERVATION_TYPES)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    notes = models.TextField(blank=True)
    start_hobbs = models.DecimalField(max_digits=8, decimal_places=1, blank=True, null=True)
    end_hobbs = models.DecimalField(max_digits=8, decimal_places=1, blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ReservationQuerySet.as_manager()

    class Meta:
        ordering = ['start_time']
        indexes = [
            models.Index(fields=['aircraft', 'start_time', 'end_time'], name='reservation_aircraft_range'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(end_time__gt=F('start_time')),
                name='reservation_end_after_start',
            ),
            models.CheckConstraint(
                condition=Q(start_hobbs__isnull=True) | Q(end_hobbs__isnull=True) | Q(end_hobbs__gte=F('start_hobbs')),
                name='reservation_hobbs_non_decreasing',
            ),
        ]

    def __str__(self):
        return f"{self.aircraft.tail_number} - {self.title} {self.start_time:%Y-%m-%d %H:%M}"

    @property
    def is_completed(self):
        return self.completed_at is not None

    @property
    def hobbs_used(self):
        if self.start_hobbs is None or self.end_hobbs is None:
            return None
        return self.end_hobbs - self.start_hobbs
