# apps/detention/attendance.py
"""
Attendance state machine for detention sessions.

pending -> attended | absent, absent -> reassigned (by the allocator),
reassigned -> attended | absent. Attended is final.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.db import transaction

from apps.core.exceptions import (
    InvalidTransition, NoCapacityAvailable, NotFound, ServiceError, ValidationError,
    persistence_guard,
)
from apps.students.services import get_by_barcode
from .allocator import Reassignment, reassign
from .models import ViolationRecord
from .violations import get_violation

logger = logging.getLogger(__name__)

MARKABLE = (ViolationRecord.Status.ATTENDED, ViolationRecord.Status.ABSENT)


@dataclass
class AttendanceOutcome:
    violation: ViolationRecord
    reassignment: Optional[Reassignment] = None
    reschedule_error: str = ''

    @property
    def status(self):
        return self.violation.status

    def as_dict(self):
        data = {
            'violation_id': str(self.violation.pk),
            'success': True,
            'status': self.violation.status,
            'detention_date': self.violation.detention_date.isoformat(),
        }
        if self.reassignment:
            data['reassigned_to'] = self.reassignment.new_date.isoformat()
        if self.reschedule_error:
            # the absence is saved but the student still needs a session
            data['success'] = False
            data['code'] = NoCapacityAvailable.code
            data['reschedule_error'] = self.reschedule_error
        return data


def _set_status(violation_id, status, performed_by=None):
    with transaction.atomic(), persistence_guard('update attendance'):
        violation = get_violation(violation_id, lock=True)
        if not violation.can_transition_to(status):
            raise InvalidTransition(
                f'Cannot mark a {violation.status} detention as {status}.',
                current=violation.status,
                requested=status,
            )
        violation._previous_status = violation.status
        violation._audit_user = performed_by
        violation.status = status
        violation.save(update_fields=['status', 'updated_at'])
    return violation


def mark_attendance(violation_id, status, performed_by=None):
    """
    Record whether the student attended their detention.

    Marking absent commits the absence first, then asks the allocator for a new
    session. If no session has room the violation stays absent and the outcome
    carries the reason.
    """
    if status not in MARKABLE:
        raise ValidationError('Attendance can only be marked as attended or absent.', field='status')

    violation = _set_status(violation_id, status, performed_by)
    outcome = AttendanceOutcome(violation=violation)

    if status == ViolationRecord.Status.ABSENT:
        try:
            outcome.reassignment = reassign(violation.pk, performed_by=performed_by)
            outcome.violation = outcome.reassignment.violation
        except NoCapacityAvailable as e:
            outcome.reschedule_error = e.message

    logger.info(f"Violation {violation.pk} marked {status}")
    return outcome


def mark_bulk(violation_ids, status, performed_by=None):
    """
    Mark several violations at once; each is handled on its own and a failure
    never affects the others. Returns one result dict per id, in order.
    """
    if status not in MARKABLE:
        raise ValidationError('Attendance can only be marked as attended or absent.', field='status')

    results = []
    for violation_id in violation_ids:
        try:
            results.append(mark_attendance(violation_id, status, performed_by).as_dict())
        except ServiceError as e:
            results.append({
                'violation_id': str(violation_id),
                'success': False,
                'error': e.message,
                'code': e.code,
            })
    return results


def session_roster(date):
    """Violations bound to the detention session(s) on ``date``."""
    return (
        ViolationRecord.objects.filter(detention_date=date)
        .select_related('student', 'slot', 'teacher')
        .order_by('student__name')
    )


def check_in_by_barcode(date, barcode, performed_by=None):
    """Mark the student whose ID card was scanned as attended for ``date``."""
    student = get_by_barcode(barcode)
    violation = (
        session_roster(date)
        .filter(student=student, status__in=[ViolationRecord.Status.PENDING, ViolationRecord.Status.REASSIGNED])
        .first()
    )
    if violation is None:
        raise NotFound(f'{student.name} has no detention to check in on {date}.', barcode=student.barcode)
    return mark_attendance(violation.pk, ViolationRecord.Status.ATTENDED, performed_by)
