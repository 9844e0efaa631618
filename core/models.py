from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

import uuid


PRIVILEGE_PENDING = 'pending'
PRIVILEGE_USER = 'user'
PRIVILEGE_MAINTAINER = 'maintainer'
PRIVILEGE_ADMIN = 'admin'

PRIVILEGE_LEVELS = (
    (PRIVILEGE_PENDING, 'Pending Approval'),
    (PRIVILEGE_USER, 'User'),
    (PRIVILEGE_MAINTAINER, 'Maintainer'),
    (PRIVILEGE_ADMIN, 'Admin'),
)


class SchedulerUserManager(UserManager):

    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault('privileges', PRIVILEGE_ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    """Account with a coarse privilege level.

    New self-registered accounts start as ``pending`` and cannot use the
    API until an admin promotes them.
    """
    privileges = models.CharField(max_length=20, choices=PRIVILEGE_LEVELS, default=PRIVILEGE_PENDING)

    objects = SchedulerUserManager()

    class Meta:
        ordering = ['username']

    @property
    def privilege_level(self):
        if self.is_superuser:
            return PRIVILEGE_ADMIN
        return self.privileges

    @property
    def is_approved(self):
        return self.privilege_level != PRIVILEGE_PENDING

    @property
    def display_name(self):
        full = self.get_full_name()
        return full if full else self.username


class Aircraft(models.Model):
    id = models.UUIDField(primary_key=True, blank=False, default=uuid.uuid4, editable=False)
    tail_number = models.CharField(max_length=20, blank=False, unique=True)
    make = models.CharField(max_length=100, blank=False)
    model = models.CharField(max_length=100, blank=False)
    year = models.PositiveSmallIntegerField(
        blank=True, null=True,
        validators=[MinValueValidator(1900), MaxValueValidator(2100)],
    )
    # Advanced only by reservation completion once the aircraft exists
    last_hobbs = models.DecimalField(max_digits=8, decimal_places=1, default=0.0,
                                     validators=[MinValueValidator(0)])
    added = models.DateTimeField(auto_now_add=True, editable=False)

    class Meta:
        ordering = ['tail_number']
        verbose_name_plural = 'aircraft'

    def __str__(self):
        return f"{self.tail_number} - {self.make} {self.model}"


class AircraftSubscription(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, related_name='aircraft_subscriptions', on_delete=models.CASCADE)
    aircraft = models.ForeignKey(Aircraft, related_name='subscriptions', on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'aircraft')
        ordering = ['created_at']

    def __str__(self):
        return f"{self.user} subscribed to {self.aircraft.tail_number}"


EVENT_CATEGORIES = (
    ('aircraft', 'Aircraft'),
    ('reservation', 'Reservation'),
    ('hours', 'Hours Update'),
    ('issue', 'Issue'),
)


class AircraftEvent(models.Model):
    id = models.UUIDField(primary_key=True, blank=False, default=uuid.uuid4, editable=False)
    aircraft = models.ForeignKey(Aircraft, related_name='events', on_delete=models.CASCADE, blank=False)
    timestamp = models.DateTimeField(auto_now_add=True, editable=False)
    category = models.CharField(max_length=50, blank=False, choices=EVENT_CATEGORIES)
    event_name = models.CharField(max_length=254, blank=False)
    notes = models.TextField(blank=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL)

    class Meta:
        ordering = ['-timestamp']

    def __str__(self):
        return f"{self.aircraft.tail_number} - {self.event_name}"
