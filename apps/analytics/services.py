# apps/analytics/services.py
"""
Behavior analytics over violation records.
"""

from datetime import timedelta

from django.db.models import Count
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.core.exceptions import ValidationError
from apps.core.spreadsheets import write_csv
from apps.detention.models import ViolationRecord

PERIODS = ('week', 'month', 'year')


def period_start(period, today=None):
    """
    First day covered by a reporting period ending today.

    week: the last 7 days, month: since the 1st of this month,
    year: the last 12 months.
    """
    today = today or timezone.localdate()
    if period == 'week':
        return today - timedelta(days=7)
    if period == 'month':
        return today.replace(day=1)
    if period == 'year':
        try:
            return today.replace(year=today.year - 1)
        except ValueError:
            # 29 February
            return today.replace(year=today.year - 1, day=28)
    raise ValidationError(f"Unknown period '{period}'. Use one of: {', '.join(PERIODS)}.", field='period')


def violation_summary(period='month', today=None):
    """
    Totals, breakdowns, daily trend and top offenders for violations created
    in the period.

    Returns:
        dict with total_violations, total_students, attendance_rate (percent),
        by_type, by_grade, daily (zero-filled) and top_students
    """
    today = today or timezone.localdate()
    start = period_start(period, today)
    violations = ViolationRecord.objects.filter(created_at__date__range=(start, today))

    total = violations.count()
    attended = violations.filter(status=ViolationRecord.Status.ATTENDED).count()

    by_type = (
        violations.values('violation_type')
        .annotate(count=Count('id'))
        .order_by('-count', 'violation_type')
    )
    by_grade = (
        violations.values('student__grade')
        .annotate(count=Count('id'))
        .order_by('student__grade')
    )
    top_students = (
        violations.values('student_id', 'student__name', 'student__barcode')
        .annotate(count=Count('id'))
        .order_by('-count', 'student__name')[:5]
    )

    daily = {start + timedelta(days=offset): 0 for offset in range((today - start).days + 1)}
    per_day = (
        violations.annotate(day=TruncDate('created_at'))
        .values('day')
        .annotate(count=Count('id'))
    )
    for row in per_day:
        if row['day'] in daily:
            daily[row['day']] = row['count']

    return {
        'period': period,
        'start': start.isoformat(),
        'end': today.isoformat(),
        'total_violations': total,
        'total_students': violations.values('student_id').distinct().count(),
        'attendance_rate': round(attended / total * 100, 2) if total else 0.0,
        'by_type': [{'type': row['violation_type'], 'count': row['count']} for row in by_type],
        'by_grade': [{'grade': row['student__grade'], 'count': row['count']} for row in by_grade],
        'daily': [{'date': day.isoformat(), 'count': count} for day, count in daily.items()],
        'top_students': [
            {
                'student_id': str(row['student_id']),
                'name': row['student__name'],
                'barcode': row['student__barcode'],
                'count': row['count'],
            }
            for row in top_students
        ],
    }


def export_summary_csv(summary):
    """Render a summary as CSV sections: totals, by type, by grade, top students, daily."""
    rows = [
        ['Period', f"{summary['start']} to {summary['end']}"],
        ['Total Violations', summary['total_violations']],
        ['Total Students', summary['total_students']],
        ['Attendance Rate', f"{summary['attendance_rate']:.2f}%"],
        [],
        ['Violations by Type'],
    ]
    rows += [[row['type'], row['count']] for row in summary['by_type']]
    rows += [[], ['Violations by Grade']]
    rows += [[f"Grade {row['grade']}", row['count']] for row in summary['by_grade']]
    rows += [[], ['Top Students']]
    rows += [[row['name'], row['count']] for row in summary['top_students']]
    rows += [[], ['Daily Trends']]
    rows += [[row['date'], row['count']] for row in summary['daily']]
    return write_csv(['Behavior Analytics', summary['period']], rows)
