"""
Reservation scheduling core.

All writes go through the functions in this module.  Each one runs as a
single transaction:

- create/update lock the target aircraft row before the overlap check, so
  two bookings for the same aircraft are serialized and cannot both pass
  the check;
- complete locks the reservation row, re-checks ``completed_at IS NULL``
  with a conditional UPDATE and advances the aircraft meter in the same
  transaction.  This is the only writer of ``Aircraft.last_hobbs`` once
  the aircraft exists.

Authorization is delegated to the policy table in core.permissions.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from core.events import log_event
from core.exceptions import Conflict, InvalidState
from core.models import Aircraft
from core.permissions import (
    STATE_OPEN, actor_tags, check_reservation_policy, reservation_allowed_actors,
)
from reservations.models import HOBBS_MAX, Reservation, RESERVATION_TYPES, quantize_hobbs
from reservations.notifications import dispatch_new_reservation

logger = logging.getLogger(__name__)

CONFLICT_MESSAGE = 'Time slot conflicts with an existing reservation'
RESERVATION_TYPE_VALUES = {value for value, _ in RESERVATION_TYPES}


def find_conflicts(aircraft_id, start_time, end_time, excluding_id=None):
    """Reservations on the aircraft overlapping [start_time, end_time).

    Completed reservations are included; the check is purely temporal.
    """
    qs = Reservation.objects.for_aircraft(aircraft_id).overlapping(start_time, end_time)
    if excluding_id is not None:
        qs = qs.exclude(pk=excluding_id)
    return qs


def has_conflict(aircraft_id, start_time, end_time, excluding_id=None):
    return find_conflicts(aircraft_id, start_time, end_time, excluding_id).exists()


def _validate_booking(title, start_time, end_time):
    errors = {}
    if title not in RESERVATION_TYPE_VALUES:
        errors['title'] = ['Type must be Personal, Shared, or Maintenance']
    if start_time is None:
        errors['start_time'] = ['Valid start time required']
    if end_time is None:
        errors['end_time'] = ['Valid end time required']
    elif start_time is not None and end_time <= start_time:
        errors['end_time'] = ['End time must be after start time']
    if errors:
        raise ValidationError(errors)


def _parse_hobbs(value, field):
    if value is None or value == '':
        raise ValidationError({field: ['Hobbs start and end are required']})
    try:
        parsed = Decimal(str(value))
    except (ValueError, InvalidOperation, TypeError):
        raise ValidationError({field: ['Hobbs values must be numbers']})
    if not parsed.is_finite():
        raise ValidationError({field: ['Hobbs values must be numbers']})
    if parsed < 0:
        raise ValidationError({field: ['Hobbs values cannot be negative']})
    if parsed > HOBBS_MAX:
        raise ValidationError({field: [f'Hobbs values cannot exceed {HOBBS_MAX}']})
    return quantize_hobbs(parsed)


def _lock_aircraft(aircraft_id):
    try:
        return Aircraft.objects.select_for_update().get(pk=aircraft_id)
    except (Aircraft.DoesNotExist, DjangoValidationError):
        raise NotFound('Aircraft not found')


def _lock_reservation(reservation_id):
    try:
        return Reservation.objects.select_for_update().get(pk=reservation_id)
    except (Reservation.DoesNotExist, DjangoValidationError):
        raise NotFound('Reservation not found')


def _range_note(reservation):
    return f"{reservation.start_time.isoformat()} to {reservation.end_time.isoformat()}"


def create_reservation(user, aircraft_id, title, start_time, end_time, notes=''):
    """Book the aircraft for the requesting user.

    Raises ValidationError, PermissionDenied, NotFound or Conflict; on any
    of them nothing is written.  Subscribers are notified once the outermost
    transaction commits, so a rolled-back booking sends no mail.
    """
    if not actor_tags(user) & reservation_allowed_actors('create', STATE_OPEN):
        raise PermissionDenied('Not authorized')
    _validate_booking(title, start_time, end_time)

    with transaction.atomic():
        aircraft = _lock_aircraft(aircraft_id)
        if has_conflict(aircraft.pk, start_time, end_time):
            logger.info(
                "Booking conflict on %s for %s - %s", aircraft.tail_number, start_time, end_time,
            )
            raise Conflict(CONFLICT_MESSAGE)
        reservation = Reservation.objects.create(
            aircraft=aircraft,
            user=user,
            title=title,
            start_time=start_time,
            end_time=end_time,
            notes=notes or '',
        )
        log_event(aircraft, 'reservation', f"{title} reservation created",
                  user=user, notes=_range_note(reservation))
        transaction.on_commit(lambda: dispatch_new_reservation(reservation, aircraft, user.username))

    return reservation


def update_reservation(user, reservation_id, aircraft_id, title, start_time, end_time, notes=''):
    """Overwrite aircraft, category, time range and notes.  The owner never changes."""
    _validate_booking(title, start_time, end_time)

    with transaction.atomic():
        reservation = _lock_reservation(reservation_id)
        check_reservation_policy(user, reservation, 'update')
        aircraft = _lock_aircraft(aircraft_id)
        if has_conflict(aircraft.pk, start_time, end_time, excluding_id=reservation.pk):
            logger.info(
                "Booking conflict on %s for %s - %s (editing %s)",
                aircraft.tail_number, start_time, end_time, reservation.pk,
            )
            raise Conflict(CONFLICT_MESSAGE)

        reservation.aircraft = aircraft
        reservation.title = title
        reservation.start_time = start_time
        reservation.end_time = end_time
        reservation.notes = notes or ''
        reservation.save(update_fields=['aircraft', 'title', 'start_time', 'end_time', 'notes'])
        log_event(aircraft, 'reservation', f"{title} reservation updated",
                  user=user, notes=_range_note(reservation))

    return reservation


def complete_reservation(user, reservation_id, start_hobbs, end_hobbs):
    """Record Hobbs usage, close the reservation and advance the aircraft meter."""
    start_hobbs = _parse_hobbs(start_hobbs, 'start_hobbs')
    end_hobbs = _parse_hobbs(end_hobbs, 'end_hobbs')
    if end_hobbs < start_hobbs:
        raise ValidationError({'end_hobbs': ['Hobbs end must be >= Hobbs start']})

    with transaction.atomic():
        reservation = _lock_reservation(reservation_id)
        check_reservation_policy(user, reservation, 'complete')

        # Re-checked in the UPDATE itself in case the row lock is a no-op (SQLite)
        updated = Reservation.objects.filter(pk=reservation.pk, completed_at__isnull=True).update(
            start_hobbs=start_hobbs,
            end_hobbs=end_hobbs,
            completed_at=timezone.now(),
        )
        if not updated:
            raise InvalidState('Reservation already completed')
        Aircraft.objects.filter(pk=reservation.aircraft_id).update(last_hobbs=end_hobbs)

        reservation.refresh_from_db()
        log_event(
            reservation.aircraft, 'hours',
            f"Hobbs updated to {end_hobbs}",
            user=user,
            notes=f"Reservation completed: {start_hobbs} to {end_hobbs}",
        )

    logger.info(
        "Reservation %s completed on %s (%s -> %s)",
        reservation.pk, reservation.aircraft.tail_number, start_hobbs, end_hobbs,
    )
    return reservation


def delete_reservation(user, reservation_id):
    """Delete a reservation, completed or not.

    The aircraft meter is not rewound; when a completed reservation goes,
    its Hobbs range is kept in the audit event.
    """
    with transaction.atomic():
        reservation = _lock_reservation(reservation_id)
        check_reservation_policy(user, reservation, 'destroy')
        aircraft = reservation.aircraft
        notes = _range_note(reservation)
        if reservation.is_completed:
            notes += f", completed with Hobbs {reservation.start_hobbs} to {reservation.end_hobbs}"
        reservation.delete()
        log_event(aircraft, 'reservation', 'Reservation deleted', user=user, notes=notes)


def completed_usage(start, end, aircraft_id=None):
    """Completed reservations lying entirely within [start, end]."""
    qs = (
        Reservation.objects.completed()
        .filter(start_time__gte=start, end_time__lte=end)
        .select_related('aircraft', 'user')
        .order_by('start_time')
    )
    if aircraft_id:
        qs = qs.filter(aircraft_id=aircraft_id)
    return qs
