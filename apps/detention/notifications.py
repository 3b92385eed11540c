# apps/detention/notifications.py
"""
Notification payloads for detention events.
"""

from django.conf import settings
from django.utils.formats import date_format

from apps.communication.models import EventKind
from apps.communication.notifications import dispatcher


def format_day(value):
    return date_format(value, 'l, F j, Y')


def notify_violation_assigned(violation):
    """Student and parent get the notice, the issuing teacher is copied."""
    student = violation.student
    teacher = violation.teacher
    slot = violation.slot
    return dispatcher.send(EventKind.VIOLATION_ASSIGNED, {
        'recipients': [student.email, student.parent_email],
        'cc': [teacher.email] if teacher else [],
        'context': {
            'student_name': student.name,
            'violation_type': violation.violation_type,
            'assigned_date': format_day(violation.assigned_date),
            'detention_date': format_day(violation.detention_date),
            'detention_time': slot.start_time,
            'location': slot.location,
            'teacher_name': teacher.display_name if teacher else 'the school office',
            'teacher_email': teacher.email if teacher else settings.DEFAULT_FROM_EMAIL,
            'show_access_code': not student.parent_verified,
            'access_code': student.parent_access_code,
            'parent_portal_url': getattr(settings, 'PARENT_PORTAL_URL', ''),
        },
    })


def notify_detention_rescheduled(violation):
    student = violation.student
    teacher = violation.teacher
    slot = violation.slot
    return dispatcher.send(EventKind.DETENTION_RESCHEDULED, {
        'recipients': [student.email, teacher.email if teacher else ''],
        'context': {
            'student_name': student.name,
            'detention_date': format_day(violation.detention_date),
            'detention_time': slot.start_time,
            'location': slot.location,
            'violation_type': violation.violation_type,
            'reschedule_count': violation.reschedule_count,
        },
    })


def notify_monitor_signup(teacher, slots):
    slots = sorted(slots, key=lambda slot: slot.date)
    return dispatcher.send(EventKind.MONITOR_SIGNUP, {
        'recipients': [teacher.email],
        'context': {
            'teacher_name': teacher.display_name,
            'dates': [format_day(slot.date) for slot in slots],
            'location': slots[0].location if slots else '',
            'detention_time': getattr(settings, 'DETENTION_START_TIME', '3:45 PM'),
        },
    })


def notify_monitor_reminder(slot, student_count):
    return dispatcher.send(EventKind.MONITOR_REMINDER, {
        'recipients': [slot.teacher.email],
        'context': {
            'teacher_name': slot.teacher.display_name,
            'location': slot.location,
            'detention_time': slot.start_time,
            'student_count': student_count,
        },
    })
