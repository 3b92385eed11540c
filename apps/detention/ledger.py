# apps/detention/ledger.py
"""
Warning ledger: decides whether an infraction is only a warning or a
violation that needs a detention.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count

from apps.core.exceptions import NotFound, ValidationError, persistence_guard
from apps.students.models import Student
from .models import StudentWarning, ViolationRecord

logger = logging.getLogger(__name__)

WARNING = 'warning'
VIOLATION = 'violation'


@dataclass
class InfractionOutcome:
    kind: str
    warning: Optional[StudentWarning] = None
    warning_count: int = 0
    violation: Optional[ViolationRecord] = None

    @property
    def requires_detention(self):
        return self.kind == VIOLATION


def warning_threshold():
    return getattr(settings, 'WARNING_THRESHOLD', 2)


def record_infraction(student_id, violation_type, teacher=None, force_warning=False):
    """
    Record a warning while the student is under the threshold for this
    violation type, otherwise report that a violation is required.

    Args:
        student_id: Student primary key
        violation_type: Free-text violation reason
        teacher: Issuing user (optional)
        force_warning: Always record a warning regardless of the count

    Returns:
        InfractionOutcome; nothing is written for a violation outcome
    """
    violation_type = (violation_type or '').strip()
    if not violation_type:
        raise ValidationError('Please select a violation type.', field='violation_type')

    with transaction.atomic(), persistence_guard('record infraction'):
        # Lock the student row so concurrent infractions count one at a time
        try:
            student = Student.objects.select_for_update().get(pk=student_id)
        except (Student.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFound('Student not found.')

        count = StudentWarning.objects.filter(student=student, violation_type=violation_type).count()
        if count >= warning_threshold() and not force_warning:
            return InfractionOutcome(kind=VIOLATION, warning_count=count)

        warning = StudentWarning.objects.create(
            student=student,
            teacher=teacher,
            violation_type=violation_type,
        )

    logger.info(f"Warning {count + 1} for {violation_type} recorded for {student.barcode}")
    return InfractionOutcome(kind=WARNING, warning=warning, warning_count=count + 1)


def warning_counts(student):
    """Warnings per violation type for one student."""
    rows = (
        StudentWarning.objects.filter(student=student)
        .values('violation_type')
        .annotate(total=Count('id'))
        .order_by('violation_type')
    )
    return {row['violation_type']: row['total'] for row in rows}
