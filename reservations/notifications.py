"""
Reservation notifications.

Subscribers of an aircraft get an email whenever a new reservation is
booked on it.  Delivery is best effort: nothing raised here ever reaches
the booking request.
"""

import logging
import threading

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail
from django.db import connection
from django.template.loader import render_to_string

logger = logging.getLogger(__name__)


def subscriber_emails(aircraft):
    User = get_user_model()
    return list(
        User.objects.filter(aircraft_subscriptions__aircraft=aircraft, is_active=True)
        .exclude(email='')
        .values_list('email', flat=True)
        .distinct()
    )


def notify_new_reservation(reservation, aircraft, booked_by):
    """Email every subscriber of ``aircraft`` about ``reservation``.

    Returns the number of recipients, 0 when there were none or sending
    failed.
    """
    try:
        recipients = subscriber_emails(aircraft)
        if not recipients:
            return 0

        context = {
            'reservation': reservation,
            'aircraft': aircraft,
            'booked_by': booked_by,
        }
        send_mail(
            subject=f"{reservation.title} Reservation: {aircraft.tail_number}",
            message=render_to_string('reservations/email/new_reservation.txt', context),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=recipients,
            html_message=render_to_string('reservations/email/new_reservation.html', context),
        )
        logger.info("Reservation notification sent to %d subscribed user(s)", len(recipients))
        return len(recipients)
    except Exception:
        logger.exception("Reservation notification failed for %s", getattr(reservation, 'pk', None))
        return 0


def _notify_in_thread(reservation, aircraft, booked_by):
    try:
        notify_new_reservation(reservation, aircraft, booked_by)
    finally:
        connection.close()


def dispatch_new_reservation(reservation, aircraft, booked_by):
    """Hand the notification off without delaying the booking response.

    Runs on a daemon thread unless RESERVATION_NOTIFICATIONS_ASYNC is off,
    in which case it runs inline (tests, management commands).
    """
    if not getattr(settings, 'RESERVATION_NOTIFICATIONS_ASYNC', True):
        notify_new_reservation(reservation, aircraft, booked_by)
        return None

    t = threading.Thread(
        target=_notify_in_thread,
        args=(reservation, aircraft, booked_by),
        daemon=True,
    )
    t.start()
    return t
