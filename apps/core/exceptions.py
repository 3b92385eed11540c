"""
Typed failures raised by the service layer.

Views never build error payloads by hand: every ``ServiceError`` carries the
HTTP status and machine-readable code that ``apps.core.api`` renders.
"""

import logging
from contextlib import contextmanager

from django.db import DatabaseError

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for failures reported back to the calling action."""

    status_code = 400
    code = 'error'
    default_message = 'The request could not be completed.'

    def __init__(self, message=None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Missing or malformed required input."""

    status_code = 400
    code = 'validation_error'
    default_message = 'Please fill in all required fields.'


class InvalidTransition(ServiceError):
    """A status change the attendance state machine does not allow."""

    status_code = 409
    code = 'invalid_transition'
    default_message = 'This status change is not allowed.'


class NoCapacityAvailable(ServiceError):
    status_code = 409
    code = 'no_capacity'
    default_message = 'No available detention slots found.'


class NotFound(ServiceError):
    status_code = 404
    code = 'not_found'
    default_message = 'The requested record does not exist.'


class PersistenceError(ServiceError):
    status_code = 503
    code = 'persistence_error'
    default_message = 'The database is unavailable, please try again.'


class NotificationError(ServiceError):
    """
    Email dispatch failed.

    Only raised inside the notification layer; the dispatcher logs and absorbs it.
    """

    status_code = 502
    code = 'notification_error'
    default_message = 'Failed to send notification.'


@contextmanager
def persistence_guard(action):
    """Re-raise database failures inside the block as ``PersistenceError``."""
    try:
        yield
    except DatabaseError as exc:
        logger.error(f"Database error while trying to {action}: {exc}")
        raise PersistenceError(f"Failed to {action}.") from exc
