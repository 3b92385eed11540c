# apps/analytics/tests.py

from datetime import date, timedelta

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core.exceptions import ValidationError
from apps.detention.models import DetentionSlot, ViolationRecord
from apps.students.models import Student
from . import services

User = get_user_model()


class AnalyticsTestCase(TestCase):
    """Test cases for violation analytics"""

    def setUp(self):
        """Set up test data"""
        self.today = timezone.localdate()
        self.teacher = User.objects.create_user(email='ms.lee@episd.org', password='testpass123', is_approved=True)
        self.slot = DetentionSlot.objects.create(teacher=self.teacher, date=self.today + timedelta(days=1))
        self.ana = Student.objects.create(name='Ana Ruiz', email='ana@episd.org', barcode='100001', grade=9)
        self.ben = Student.objects.create(name='Ben Ortiz', email='ben@episd.org', barcode='100002', grade=11)

        self.violations = [
            self.violation(self.ana, 'Tardy', ViolationRecord.Status.ATTENDED),
            self.violation(self.ana, 'Tardy', ViolationRecord.Status.ABSENT),
            self.violation(self.ana, 'Improper phone use', ViolationRecord.Status.PENDING),
            self.violation(self.ben, 'Tardy', ViolationRecord.Status.ATTENDED),
        ]
        self.three_days_ago = timezone.now() - timedelta(days=3)
        ViolationRecord.objects.filter(pk=self.violations[3].pk).update(created_at=self.three_days_ago)

    def violation(self, student, violation_type, status):
        return ViolationRecord.objects.create(
            student=student,
            teacher=self.teacher,
            violation_type=violation_type,
            detention_date=self.slot.date,
            slot=self.slot,
            status=status,
        )

    def test_week_summary(self):
        summary = services.violation_summary('week', today=self.today)

        self.assertEqual(summary['total_violations'], 4)
        self.assertEqual(summary['total_students'], 2)
        self.assertEqual(summary['attendance_rate'], 50.0)
        self.assertEqual(summary['by_type'], [
            {'type': 'Tardy', 'count': 3},
            {'type': 'Improper phone use', 'count': 1},
        ])
        self.assertEqual(summary['by_grade'], [{'grade': 9, 'count': 3}, {'grade': 11, 'count': 1}])
        self.assertEqual([row['name'] for row in summary['top_students']], ['Ana Ruiz', 'Ben Ortiz'])
        self.assertEqual(summary['top_students'][0]['count'], 3)

    def test_daily_trend_is_zero_filled(self):
        summary = services.violation_summary('week', today=self.today)
        daily = {row['date']: row['count'] for row in summary['daily']}

        self.assertEqual(len(summary['daily']), 8)
        self.assertEqual(summary['daily'][0]['date'], (self.today - timedelta(days=7)).isoformat())
        self.assertEqual(daily[self.today.isoformat()], 3)
        self.assertEqual(daily[timezone.localdate(self.three_days_ago).isoformat()], 1)
        self.assertEqual(sum(daily.values()), 4)

    def test_old_violations_fall_outside_period(self):
        ViolationRecord.objects.filter(pk=self.violations[0].pk).update(created_at=timezone.now() - timedelta(days=20))

        summary = services.violation_summary('week', today=self.today)
        self.assertEqual(summary['total_violations'], 3)
        self.assertEqual(services.violation_summary('year', today=self.today)['total_violations'], 4)

    def test_empty_period(self):
        ViolationRecord.objects.all().delete()
        summary = services.violation_summary('week', today=self.today)
        self.assertEqual((summary['total_violations'], summary['attendance_rate']), (0, 0.0))
        self.assertEqual(summary['top_students'], [])

    def test_period_start(self):
        self.assertEqual(services.period_start('month', date(2026, 3, 17)), date(2026, 3, 1))
        self.assertEqual(services.period_start('week', date(2026, 3, 17)), date(2026, 3, 10))
        self.assertEqual(services.period_start('year', date(2028, 2, 29)), date(2027, 2, 28))
        with self.assertRaises(ValidationError):
            services.period_start('decade', date(2026, 3, 17))

    def test_export_csv(self):
        content = services.export_summary_csv(services.violation_summary('week', today=self.today))
        lines = content.splitlines()

        self.assertEqual(lines[0], 'Behavior Analytics,week')
        self.assertIn('Total Violations,4', lines)
        self.assertIn('Attendance Rate,50.00%', lines)
        self.assertIn('Tardy,3', lines)
        self.assertIn('Grade 9,3', lines)
        self.assertIn('Ana Ruiz,3', lines)
        self.assertIn(f'{self.today.isoformat()},3', lines)


class AnalyticsAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.teacher = User.objects.create_user(email='ms.lee@episd.org', password='testpass123', is_approved=True)
        self.pending = User.objects.create_user(email='mr.new@episd.org', password='testpass123')

    def test_summary_endpoint(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get(reverse('analytics:summary'), {'period': 'year'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['period'], 'year')

        response = self.client.get(reverse('analytics:summary'), {'period': 'forever'})
        self.assertEqual(response.status_code, 400)

    def test_export_endpoint(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get(reverse('analytics:export'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn(f'behavior-analytics-{timezone.localdate().isoformat()}.csv', response['Content-Disposition'])

    def test_requires_approved_staff(self):
        self.client.force_authenticate(self.pending)
        self.assertEqual(self.client.get(reverse('analytics:summary')).status_code, 403)
