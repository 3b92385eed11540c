# apps/detention/allocator.py
"""
Capacity allocator: moves a missed detention to the earliest future session
that still has a free seat.
"""

import logging
from dataclasses import dataclass
from datetime import date

from django.db import transaction
from django.db.models import F

from apps.core.exceptions import InvalidTransition, NoCapacityAvailable, persistence_guard
from .models import DetentionSlot, ViolationRecord
from .notifications import notify_detention_rescheduled
from .seats import reserve_seat
from .violations import get_violation

logger = logging.getLogger(__name__)


@dataclass
class Reassignment:
    violation: ViolationRecord
    new_date: date
    slot_id: object


def reassign(violation_id, performed_by=None):
    """
    Reschedule an absent violation onto the next open slot.

    Candidates are slots after today with a free seat, earliest first. A
    candidate that fills up before the seat is taken is skipped, and so is the
    session that was missed. The old slot keeps its count; exactly one slot
    gains a seat.

    Raises:
        InvalidTransition: the violation is not absent
        NoCapacityAvailable: no future slot has room; the violation stays absent
    """
    with transaction.atomic(), persistence_guard('reschedule detention'):
        violation = get_violation(violation_id, lock=True)
        if violation.status != ViolationRecord.Status.ABSENT:
            raise InvalidTransition(
                f'Only absent detentions can be rescheduled (this one is {violation.status}).'
            )

        slot = None
        for candidate in DetentionSlot.objects.reschedule_candidates().exclude(pk=violation.slot_id):
            if reserve_seat(candidate.pk):
                slot = candidate
                break
        if slot is None:
            logger.warning(f"No detention capacity to reschedule violation {violation.pk}")
            raise NoCapacityAvailable()

        violation.slot = slot
        violation.detention_date = slot.date
        violation.status = ViolationRecord.Status.REASSIGNED
        violation.reschedule_count = F('reschedule_count') + 1
        violation._previous_status = ViolationRecord.Status.ABSENT
        violation._audit_user = performed_by
        violation.save(update_fields=['slot', 'detention_date', 'status', 'reschedule_count', 'updated_at'])
        violation.refresh_from_db()
        notify_detention_rescheduled(violation)

    logger.info(f"Violation {violation.pk} rescheduled to {slot.date} (reschedule #{violation.reschedule_count})")
    return Reassignment(violation=violation, new_date=slot.date, slot_id=slot.pk)
