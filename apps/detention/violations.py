# apps/detention/violations.py
"""
Violation entry: single infractions, manual moves and bulk import.
"""

import logging
from datetime import datetime

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from apps.core.exceptions import (
    InvalidTransition, NoCapacityAvailable, NotFound, ServiceError, ValidationError,
    persistence_guard,
)
from apps.core.spreadsheets import read_rows
from apps.students.services import get_by_barcode, get_student
from . import ledger
from .models import DetentionSlot, ViolationRecord
from .notifications import notify_detention_rescheduled, notify_violation_assigned
from .seats import release_seat, reserve_seat
from .slots import get_slot

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = ['barcode', 'violation_type', 'detention_date']
DATE_FORMATS = ('%Y-%m-%d', '%m/%d/%Y', '%m/%d/%y')


def get_violation(violation_id, lock=False):
    queryset = ViolationRecord.objects.all()
    if lock:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=violation_id)
    except (ViolationRecord.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound('Violation not found.')


def file_violation(student_id, teacher, violation_type, slot_id):
    """
    Create a pending violation bound to a detention slot and take a seat on it.

    The record and the seat are written in one transaction; the assignment
    email goes out after commit.

    Raises:
        ValidationError: missing violation type or slot, or a slot in the past
        NotFound: unknown student or slot
        NoCapacityAvailable: the chosen slot is full
    """
    violation_type = (violation_type or '').strip()
    if not violation_type:
        raise ValidationError('Please select a violation type.', field='violation_type')
    if not slot_id:
        raise ValidationError('Please select a detention date.', field='slot')

    student = get_student(student_id)
    slot = get_slot(slot_id)
    if slot.date < timezone.localdate():
        raise ValidationError('The selected detention date has already passed.', field='slot')

    with transaction.atomic(), persistence_guard('create violation'):
        if not reserve_seat(slot.pk):
            raise NoCapacityAvailable('The selected detention date is full.', slot=str(slot.pk))

        violation = ViolationRecord.objects.create(
            student=student,
            teacher=teacher,
            violation_type=violation_type,
            detention_date=slot.date,
            slot=slot,
        )
        notify_violation_assigned(violation)

    logger.info(f"Violation '{violation_type}' filed for {student.barcode}, detention on {slot.date}")
    return violation


def file_infraction(student_id, teacher, violation_type, slot_id=None, force_warning=False):
    """
    Full entry flow: a warning while the student is under the threshold for
    this violation type, a detention-bound violation once it is reached.

    Returns the ledger's InfractionOutcome with ``violation`` set for a
    violation outcome.
    """
    with transaction.atomic():
        outcome = ledger.record_infraction(
            student_id, violation_type, teacher=teacher, force_warning=force_warning
        )
        if outcome.requires_detention:
            if not slot_id:
                raise ValidationError(
                    'Warning limit reached for this violation. Please select a detention date.',
                    field='slot',
                )
            outcome.violation = file_violation(student_id, teacher, violation_type, slot_id)
    return outcome


def move_violation(violation_id, slot_id, performed_by=None):
    """
    Move a pending or reassigned violation to a slot chosen by staff.

    The old seat is released and the new one taken in the same transaction.
    """
    with transaction.atomic(), persistence_guard('move violation'):
        violation = get_violation(violation_id, lock=True)
        if violation.status not in (ViolationRecord.Status.PENDING, ViolationRecord.Status.REASSIGNED):
            raise InvalidTransition(
                f'Only pending or reassigned detentions can be moved (this one is {violation.status}).'
            )

        new_slot = get_slot(slot_id)
        if new_slot.pk == violation.slot_id:
            return violation
        if new_slot.date < timezone.localdate():
            raise ValidationError('The selected detention date has already passed.', field='slot')
        if not reserve_seat(new_slot.pk):
            raise NoCapacityAvailable('The selected detention date is full.', slot=str(new_slot.pk))
        release_seat(violation.slot_id)

        violation.slot = new_slot
        violation.detention_date = new_slot.date
        violation._audit_user = performed_by
        violation.save(update_fields=['slot', 'detention_date', 'updated_at'])
        notify_detention_rescheduled(violation)

    logger.info(f"Violation {violation.pk} moved to {new_slot.date}")
    return violation


def parse_date(value):
    value = (value or '').strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValidationError(f"Invalid date '{value}'.", field='detention_date')


def import_violations(rows, teacher):
    """
    Create violations from rows of ``barcode, violation_type, detention_date``.

    Each row takes a seat on an open slot for its date and is committed on its
    own; one bad row never blocks the others. Returns one result per row.
    """
    results = []
    for index, row in enumerate(rows, start=1):
        result = {'row': index, 'barcode': row.get('barcode', ''), 'success': False}
        try:
            student = get_by_barcode(row.get('barcode'))
            detention_date = parse_date(row.get('detention_date'))
            violation = _file_on_date(student, teacher, row.get('violation_type'), detention_date)
            result.update(success=True, violation_id=str(violation.pk), detention_date=detention_date.isoformat())
        except ServiceError as e:
            result.update(error=e.message, code=e.code)
        results.append(result)

    created = sum(1 for result in results if result['success'])
    logger.info(f"Violation import finished: {created} of {len(results)} rows created")
    return results


def import_violations_file(uploaded_file, teacher):
    return import_violations(read_rows(uploaded_file, required_columns=IMPORT_COLUMNS), teacher)


def _file_on_date(student, teacher, violation_type, detention_date):
    candidates = DetentionSlot.objects.open().filter(date=detention_date).order_by('created_at')
    for slot in candidates:
        try:
            return file_violation(student.pk, teacher, violation_type, slot.pk)
        except NoCapacityAvailable:
            continue
    raise NoCapacityAvailable(f'No open detention slot on {detention_date}.')
