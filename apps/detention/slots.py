# apps/detention/slots.py
"""
Detention slot management: scheduling sessions, monitor signup and the
slot pickers used by violation entry.
"""

import logging
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.utils import timezone

from apps.core.exceptions import NotFound, ValidationError, persistence_guard
from .models import DetentionSlot, ViolationRecord
from .notifications import notify_monitor_reminder, notify_monitor_signup

logger = logging.getLogger(__name__)


def get_slot(slot_id, lock=False):
    queryset = DetentionSlot.objects.select_related('teacher')
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=slot_id)
    except (DetentionSlot.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound('Detention slot not found.')


def _check_capacity(capacity):
    try:
        capacity = int(capacity)
    except (TypeError, ValueError):
        raise ValidationError('Capacity must be a whole number.', field='capacity')
    if capacity < 1:
        raise ValidationError('Capacity must be at least 1.', field='capacity')
    return capacity


def _check_date(value):
    if value is None:
        raise ValidationError('Please choose a date.', field='date')
    if value < timezone.localdate():
        raise ValidationError('Detention dates cannot be in the past.', field='date')
    return value


def create_slot(teacher, date, capacity=None, location=None, performed_by=None):
    """
    Schedule a detention session supervised by ``teacher``.

    A teacher can supervise at most one session per day.
    """
    slot = DetentionSlot(
        teacher=teacher,
        date=_check_date(date),
        capacity=_check_capacity(capacity if capacity is not None else getattr(settings, 'DETENTION_DEFAULT_CAPACITY', 20)),
        location=(location or '').strip() or getattr(settings, 'DETENTION_DEFAULT_LOCATION', 'Cafeteria'),
    )
    slot._audit_user = performed_by or teacher

    with persistence_guard('create detention slot'):
        try:
            with transaction.atomic():
                slot.save()
        except IntegrityError:
            raise ValidationError(f'{teacher.display_name} already has a detention session on {date}.', field='date')

    logger.info(f"Detention slot created for {date} ({slot.location}, capacity {slot.capacity})")
    return slot


def update_slot(slot_id, capacity=None, location=None, performed_by=None):
    """Change capacity or location; capacity may not drop below the seats already taken."""
    with transaction.atomic(), persistence_guard('update detention slot'):
        slot = get_slot(slot_id, lock=True)
        if capacity is not None:
            capacity = _check_capacity(capacity)
            if capacity < slot.current_count:
                raise ValidationError(
                    f'Capacity cannot be lower than the {slot.current_count} students already assigned.',
                    field='capacity',
                )
            slot.capacity = capacity
        if location is not None and location.strip():
            slot.location = location.strip()

        slot._audit_user = performed_by
        slot.save(update_fields=['capacity', 'location', 'updated_at'])
    return slot


def delete_slot(slot_id, performed_by=None):
    """Delete an empty slot. Slots with students assigned are kept."""
    with transaction.atomic(), persistence_guard('delete detention slot'):
        slot = get_slot(slot_id, lock=True)
        if slot.current_count > 0:
            raise ValidationError('Cannot delete a detention slot that has students assigned.')
        slot._audit_user = performed_by
        try:
            slot.delete()
        except ProtectedError:
            raise ValidationError('Cannot delete a detention slot that has violation records.')
    logger.info(f"Detention slot {slot_id} deleted")


def monitor_signup(teacher, dates, capacity=None, location=None):
    """
    A teacher volunteers to supervise detention on several dates.

    Dates already covered by any session are rejected as a whole; on success
    the teacher receives a confirmation email listing the dates.
    """
    dates = sorted(set(dates or []))
    if not dates:
        raise ValidationError('Please select at least one date.', field='dates')
    for value in dates:
        _check_date(value)

    with transaction.atomic(), persistence_guard('sign up for detention duty'):
        taken = sorted(DetentionSlot.objects.filter(date__in=dates).values_list('date', flat=True).distinct())
        if taken:
            raise ValidationError(
                'Some dates already have a detention monitor.',
                dates=[value.isoformat() for value in taken],
            )
        slots = [
            create_slot(teacher, value, capacity=capacity, location=location)
            for value in dates
        ]
        notify_monitor_signup(teacher, slots)

    logger.info(f"{teacher.email} signed up for detention duty on {len(slots)} date(s)")
    return slots


def available_slots(days=None, today=None):
    """Open sessions from today through the next ``days`` days, earliest first."""
    days = days if days is not None else getattr(settings, 'SLOT_LOOKAHEAD_DAYS', 14)
    today = today or timezone.localdate()
    return (
        DetentionSlot.objects.open()
        .filter(date__gte=today, date__lte=today + timedelta(days=days))
        .select_related('teacher')
        .order_by('date', 'created_at')
    )


def weekly_schedule(week_of=None):
    """
    Sessions of the Monday-Sunday week containing ``week_of``, grouped by teacher.

    Returns (monday, [{'teacher': user, 'slots': [...]}, ...]).
    """
    week_of = week_of or timezone.localdate()
    monday = week_of - timedelta(days=week_of.weekday())
    slots = (
        DetentionSlot.objects.filter(date__range=(monday, monday + timedelta(days=6)))
        .select_related('teacher')
        .order_by('teacher__last_name', 'teacher__first_name', 'date')
    )

    groups = {}
    for slot in slots:
        group = groups.setdefault(slot.teacher_id, {'teacher': slot.teacher, 'slots': []})
        group['slots'].append(slot)
    return monday, list(groups.values())


def send_monitor_reminders(day=None):
    """
    Email every teacher supervising a session on ``day`` (today by default).

    Running it twice sends the reminders twice. Returns the number queued.
    """
    day = day or timezone.localdate()
    expected = [ViolationRecord.Status.PENDING, ViolationRecord.Status.REASSIGNED]
    slots = DetentionSlot.objects.filter(date=day).select_related('teacher')

    queued = 0
    for slot in slots:
        student_count = slot.violations.filter(status__in=expected).count()
        notify_monitor_reminder(slot, student_count)
        queued += 1

    logger.info(f"Queued {queued} detention monitor reminder(s) for {day}")
    return queued
