from rest_framework import permissions
from rest_framework.exceptions import PermissionDenied

from core.exceptions import InvalidState
from core.models import (
    PRIVILEGE_ADMIN, PRIVILEGE_MAINTAINER, PRIVILEGE_PENDING, PRIVILEGE_USER,
)

# Actor tags.  A requester holds its privilege level plus 'owner' when it
# booked the reservation in question.
OWNER = 'owner'
ADMIN = PRIVILEGE_ADMIN
MAINTAINER = PRIVILEGE_MAINTAINER
ANY_APPROVED = frozenset({PRIVILEGE_USER, PRIVILEGE_MAINTAINER, PRIVILEGE_ADMIN})

STATE_OPEN = 'open'
STATE_COMPLETED = 'completed'

# (operation, reservation state) -> actors allowed.  None means the state
# forbids the operation for everyone and surfaces as InvalidState.
RESERVATION_POLICY = {
    ('create', STATE_OPEN): ANY_APPROVED,
    ('update', STATE_OPEN): frozenset({OWNER, ADMIN}),
    ('update', STATE_COMPLETED): None,
    ('complete', STATE_OPEN): frozenset({OWNER, ADMIN, MAINTAINER}),
    ('complete', STATE_COMPLETED): None,
    ('destroy', STATE_OPEN): frozenset({OWNER, ADMIN}),
    ('destroy', STATE_COMPLETED): frozenset({OWNER, ADMIN}),
}

INVALID_STATE_MESSAGES = {
    'update': 'Cannot edit a completed reservation',
    'complete': 'Reservation already completed',
}

ISSUE_POLICY = {
    'create': ANY_APPROVED,
    'update_status': frozenset({ADMIN, MAINTAINER}),
    'destroy': frozenset({ADMIN, MAINTAINER}),
}

USAGE_REPORT_ACTORS = frozenset({ADMIN, MAINTAINER})


def get_privilege(user):
    """Return the effective privilege level for a user.

    Returns 'admin', 'maintainer', 'user', 'pending', or None.
    """
    if not user or not user.is_authenticated:
        return None
    if user.is_superuser:
        return PRIVILEGE_ADMIN
    return getattr(user, 'privileges', PRIVILEGE_PENDING)


def actor_tags(user, reservation=None):
    """All actor tags the user holds, optionally relative to a reservation."""
    privilege = get_privilege(user)
    if privilege is None or privilege == PRIVILEGE_PENDING:
        return frozenset()
    tags = {privilege}
    if reservation is not None and reservation.user_id == user.pk:
        tags.add(OWNER)
    return frozenset(tags)


def reservation_state(reservation):
    return STATE_COMPLETED if reservation.completed_at else STATE_OPEN


def reservation_allowed_actors(operation, state):
    return RESERVATION_POLICY[(operation, state)]


def can_perform_reservation_action(user, reservation, operation):
    allowed = reservation_allowed_actors(operation, reservation_state(reservation))
    if allowed is None:
        return False
    return bool(actor_tags(user, reservation) & allowed)


def check_reservation_policy(user, reservation, operation):
    """Raise InvalidState or PermissionDenied unless the operation is allowed.

    The state rule is evaluated first so a completed reservation answers
    InvalidState regardless of who is asking.
    """
    allowed = reservation_allowed_actors(operation, reservation_state(reservation))
    if allowed is None:
        raise InvalidState(INVALID_STATE_MESSAGES.get(operation))
    if not actor_tags(user, reservation) & allowed:
        raise PermissionDenied('Not authorized')


def has_issue_permission(user, operation):
    return bool(actor_tags(user) & ISSUE_POLICY[operation])


class IsApprovedUser(permissions.BasePermission):
    """Authenticated and past the 'pending' privilege level."""
    message = 'Account is awaiting approval'

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return get_privilege(user) != PRIVILEGE_PENDING


class IsAdmin(permissions.BasePermission):
    message = 'Admin privileges required'

    def has_permission(self, request, view):
        return get_privilege(request.user) == PRIVILEGE_ADMIN


class HasIssuePrivilege(permissions.BasePermission):
    """Consults ISSUE_POLICY for the viewset action being performed."""
    message = 'Insufficient privileges'

    action_operations = {
        'create': 'create',
        'partial_update': 'update_status',
        'destroy': 'destroy',
    }

    def has_permission(self, request, view):
        operation = self.action_operations.get(getattr(view, 'action', None))
        if operation is None:
            return True
        return has_issue_permission(request.user, operation)
