# apps/students/services.py
"""
Student records, bulk import/export and the parent portal.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction

from apps.core.exceptions import NotFound, ValidationError, persistence_guard
from apps.core.spreadsheets import read_rows, write_csv
from .models import Student

logger = logging.getLogger(__name__)

IMPORT_COLUMNS = ['name', 'email', 'barcode', 'grade']
EXPORT_COLUMNS = ['name', 'email', 'parent_email', 'barcode', 'grade', 'parent_access_code', 'parent_verified']


def get_student(student_id):
    try:
        return Student.objects.get(pk=student_id)
    except (Student.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFound('Student not found.')


def get_by_barcode(barcode):
    barcode = (barcode or '').strip()
    try:
        return Student.objects.get(barcode=barcode)
    except Student.DoesNotExist:
        raise NotFound(f'No student with barcode {barcode}.', barcode=barcode)


def search_students(term, limit=5):
    if not term or not term.strip():
        return Student.objects.none()
    return Student.objects.search(term, limit=limit)


def student_history(student):
    """
    Violations and warnings of one student, newest first, with the warning
    count per violation type.
    """
    from apps.detention.ledger import warning_counts
    from apps.detention.models import StudentWarning, ViolationRecord

    violations = ViolationRecord.objects.filter(student=student).select_related('slot', 'teacher')
    warnings = StudentWarning.objects.filter(student=student).select_related('teacher')
    return {
        'violations': list(violations),
        'warnings': list(warnings),
        'warning_counts': warning_counts(student),
    }


def _clean_barcode(value):
    value = (value or '').strip()
    if value.isdigit() and len(value) < 6:
        value = value.zfill(6)
    return value


def import_students(uploaded_file):
    """
    Create students from an uploaded CSV or Excel file.

    Columns: name, email, barcode, grade and optionally parent_email.
    Each row is saved in its own transaction; returns one result per row.
    """
    records = read_rows(uploaded_file, required_columns=IMPORT_COLUMNS)
    results = []

    for index, row in enumerate(records, start=2):
        result = {'row': index, 'barcode': row.get('barcode', ''), 'success': False}
        try:
            with transaction.atomic():
                student = Student(
                    name=row.get('name', ''),
                    email=row.get('email', ''),
                    parent_email=row.get('parent_email', ''),
                    barcode=_clean_barcode(row.get('barcode')),
                    grade=int(row.get('grade') or 0),
                )
                if Student.objects.filter(barcode=student.barcode).exists():
                    raise ValueError(f"Student with barcode {student.barcode} already exists")
                student.full_clean(exclude=['parent_access_code'])
                student.save()
            result.update(success=True, student_id=str(student.id))
        except DjangoValidationError as e:
            result['error'] = '; '.join(
                f"{field}: {', '.join(messages)}" for field, messages in e.message_dict.items()
            )
        except (ValueError, IntegrityError) as e:
            result['error'] = str(e)
        results.append(result)

    created = sum(1 for result in results if result['success'])
    logger.info(f"Student import finished: {created} of {len(results)} rows created")
    return results


def export_students(queryset=None):
    queryset = Student.objects.all() if queryset is None else queryset
    rows = (
        [getattr(student, column) for column in EXPORT_COLUMNS]
        for student in queryset.order_by('name')
    )
    return write_csv(EXPORT_COLUMNS, rows)


def regenerate_access_code(student):
    """Issue a new parent access code; the parent must verify again."""
    with persistence_guard('regenerate access code'):
        student.parent_access_code = Student.generate_access_code()
        student.parent_verified = False
        student.parent_verified_at = None
        student.save(update_fields=['parent_access_code', 'parent_verified', 'parent_verified_at', 'updated_at'])
    logger.info(f"New parent access code issued for {student.barcode}")
    return student


def verify_access_code(code):
    """
    Look up the student behind a parent access code.

    The first successful lookup marks the parent as verified.
    Returns the student and their violation history.
    """
    code = (code or '').strip().upper()
    if not code:
        raise ValidationError('Please enter an access code.', field='code')

    try:
        student = Student.objects.get(parent_access_code=code)
    except Student.DoesNotExist:
        logger.info("Parent portal: invalid access code entered")
        raise NotFound('Invalid access code.')

    with persistence_guard('verify parent access'):
        if student.mark_parent_verified():
            logger.info(f"Parent of {student.barcode} verified through the portal")

    return student, student_history(student)
