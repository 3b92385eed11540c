# apps/detention/tests.py

from datetime import timedelta
from io import StringIO

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.core.management.base import CommandError
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.audit.models import AuditLog
from apps.core.exceptions import InvalidTransition, NoCapacityAvailable, NotFound, ValidationError
from apps.students.models import Student
from . import allocator, attendance, ledger, slots, violations
from .models import DetentionSlot, StudentWarning, ViolationRecord
from .notifications import format_day
from .seats import release_seat, reserve_seat

User = get_user_model()


class DetentionTestCase(TestCase):
    """Shared fixtures: an admin, two approved teachers and a few students"""

    def setUp(self):
        """Set up test data"""
        self.today = timezone.localdate()
        self.admin = User.objects.create_superuser(email='principal@episd.org', password='testpass123')
        self.teacher = User.objects.create_user(
            email='ms.lee@episd.org', password='testpass123', first_name='Grace', last_name='Lee', is_approved=True,
        )
        self.monitor = User.objects.create_user(
            email='mr.diaz@episd.org', password='testpass123', first_name='Luis', last_name='Diaz', is_approved=True,
        )
        self.students = [
            Student.objects.create(
                name=f'Student {index}',
                email=f'student{index}@episd.org',
                parent_email=f'parent{index}@home.org',
                barcode=f'{100000 + index}',
                grade=9 + index % 4,
            )
            for index in range(6)
        ]
        self.student = self.students[0]

    def make_slot(self, days_ahead=1, capacity=20, teacher=None):
        return DetentionSlot.objects.create(
            teacher=teacher or self.monitor,
            date=self.today + timedelta(days=days_ahead),
            capacity=capacity,
        )

    def assign(self, student, slot, violation_type='Tardy'):
        return violations.file_violation(student.pk, self.teacher, violation_type, slot.pk)

    def count(self, slot):
        slot.refresh_from_db()
        return slot.current_count


class SeatGuardTestCase(DetentionTestCase):
    """Test cases for seat reservation"""

    def test_reserve_stops_at_capacity(self):
        slot = self.make_slot(capacity=2)

        self.assertTrue(reserve_seat(slot.pk))
        self.assertTrue(reserve_seat(slot.pk))
        self.assertFalse(reserve_seat(slot.pk))
        self.assertEqual(self.count(slot), 2)

    def test_release_never_goes_negative(self):
        slot = self.make_slot(capacity=2)
        self.assertFalse(release_seat(slot.pk))
        reserve_seat(slot.pk)
        self.assertTrue(release_seat(slot.pk))
        self.assertEqual(self.count(slot), 0)

    def test_database_rejects_overbooking(self):
        """Occupancy above capacity is refused by the database itself"""
        slot = self.make_slot(capacity=1)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                DetentionSlot.objects.filter(pk=slot.pk).update(current_count=2)


class SlotManagementTestCase(DetentionTestCase):

    def test_create_slot_uses_defaults(self):
        slot = slots.create_slot(self.monitor, self.today + timedelta(days=3), performed_by=self.admin)

        self.assertEqual(slot.location, 'Cafeteria')
        self.assertEqual(slot.capacity, 20)
        self.assertEqual(slot.current_count, 0)
        log = AuditLog.objects.get(model_name='DetentionSlot', action=AuditLog.ActionType.CREATE)
        self.assertEqual(log.user, self.admin)

    @override_settings(DETENTION_DEFAULT_CAPACITY=12, DETENTION_DEFAULT_LOCATION='Library')
    def test_create_slot_reads_settings(self):
        slot = slots.create_slot(self.monitor, self.today)
        self.assertEqual((slot.capacity, slot.location), (12, 'Library'))

    def test_create_slot_rules(self):
        with self.assertRaises(ValidationError):
            slots.create_slot(self.monitor, self.today - timedelta(days=1))
        with self.assertRaises(ValidationError):
            slots.create_slot(self.monitor, self.today + timedelta(days=1), capacity=0)

        slots.create_slot(self.monitor, self.today + timedelta(days=1))
        with self.assertRaises(ValidationError) as ctx:
            slots.create_slot(self.monitor, self.today + timedelta(days=1))
        self.assertIn('Luis Diaz', ctx.exception.message)

    def test_update_slot_keeps_assigned_seats(self):
        slot = self.make_slot(capacity=5)
        self.assign(self.students[0], slot)
        self.assign(self.students[1], slot)

        with self.assertRaises(ValidationError):
            slots.update_slot(slot.pk, capacity=1)

        updated = slots.update_slot(slot.pk, capacity=2, location=' Gym ')
        self.assertEqual((updated.capacity, updated.location, updated.current_count), (2, 'Gym', 2))

    def test_delete_slot(self):
        busy = self.make_slot(days_ahead=1)
        self.assign(self.student, busy)
        with self.assertRaises(ValidationError):
            slots.delete_slot(busy.pk)

        empty = self.make_slot(days_ahead=2)
        slots.delete_slot(empty.pk, performed_by=self.admin)
        self.assertFalse(DetentionSlot.objects.filter(pk=empty.pk).exists())
        self.assertTrue(AuditLog.objects.filter(model_name='DetentionSlot', action=AuditLog.ActionType.DELETE).exists())

    def test_monitor_signup(self):
        """A teacher volunteers for several dates and gets one confirmation"""
        dates = [self.today + timedelta(days=2), self.today + timedelta(days=1)]

        with self.captureOnCommitCallbacks(execute=True):
            created = slots.monitor_signup(self.teacher, dates + [dates[0]])

        self.assertEqual([slot.date for slot in created], sorted(dates))
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ms.lee@episd.org'])
        self.assertIn(format_day(sorted(dates)[1]), mail.outbox[0].alternatives[0][0])

    def test_monitor_signup_rejects_taken_dates(self):
        taken = self.make_slot(days_ahead=1)
        dates = [taken.date, self.today + timedelta(days=2)]

        with self.assertRaises(ValidationError) as ctx:
            slots.monitor_signup(self.teacher, dates)

        self.assertEqual(ctx.exception.details, {'dates': [taken.date.isoformat()]})
        self.assertEqual(DetentionSlot.objects.count(), 1)

    def test_available_slots(self):
        today_slot = self.make_slot(days_ahead=0)
        soon = self.make_slot(days_ahead=3, teacher=self.teacher)
        full = self.make_slot(days_ahead=4, capacity=1)
        self.assign(self.student, full)
        self.make_slot(days_ahead=30)
        DetentionSlot.objects.create(teacher=self.teacher, date=self.today - timedelta(days=1))

        self.assertEqual(list(slots.available_slots()), [today_slot, soon])

    def test_weekly_schedule_groups_by_teacher(self):
        monday = self.today - timedelta(days=self.today.weekday())
        DetentionSlot.objects.create(teacher=self.monitor, date=monday)
        DetentionSlot.objects.create(teacher=self.monitor, date=monday + timedelta(days=2))
        DetentionSlot.objects.create(teacher=self.teacher, date=monday + timedelta(days=1))
        DetentionSlot.objects.create(teacher=self.teacher, date=monday + timedelta(days=7))

        week_start, groups = slots.weekly_schedule(monday + timedelta(days=3))

        self.assertEqual(week_start, monday)
        self.assertEqual([group['teacher'] for group in groups], [self.monitor, self.teacher])
        self.assertEqual([len(group['slots']) for group in groups], [2, 1])


class WarningLedgerTestCase(DetentionTestCase):
    """Test cases for the warning threshold"""

    def test_warnings_until_threshold(self):
        """Two warnings are recorded, the third infraction needs a detention"""
        first = ledger.record_infraction(self.student.pk, 'Tardy', teacher=self.teacher)
        second = ledger.record_infraction(self.student.pk, 'Tardy', teacher=self.teacher)
        third = ledger.record_infraction(self.student.pk, 'Tardy', teacher=self.teacher)

        self.assertEqual((first.kind, first.warning_count), (ledger.WARNING, 1))
        self.assertEqual((second.kind, second.warning_count), (ledger.WARNING, 2))
        self.assertEqual((third.kind, third.warning_count), (ledger.VIOLATION, 2))
        self.assertTrue(third.requires_detention)
        self.assertIsNone(third.warning)
        self.assertEqual(StudentWarning.objects.filter(student=self.student).count(), 2)

    def test_counts_are_per_violation_type(self):
        ledger.record_infraction(self.student.pk, 'Tardy')
        ledger.record_infraction(self.student.pk, 'Tardy')
        outcome = ledger.record_infraction(self.student.pk, 'Improper phone use')

        self.assertEqual(outcome.kind, ledger.WARNING)
        self.assertEqual(ledger.warning_counts(self.student), {'Improper phone use': 1, 'Tardy': 2})

    def test_force_warning(self):
        ledger.record_infraction(self.student.pk, 'Tardy')
        ledger.record_infraction(self.student.pk, 'Tardy')
        outcome = ledger.record_infraction(self.student.pk, 'Tardy', force_warning=True)

        self.assertEqual((outcome.kind, outcome.warning_count), (ledger.WARNING, 3))

    @override_settings(WARNING_THRESHOLD=0)
    def test_zero_threshold_goes_straight_to_detention(self):
        self.assertEqual(ledger.record_infraction(self.student.pk, 'Tardy').kind, ledger.VIOLATION)

    def test_blank_violation_type(self):
        with self.assertRaises(ValidationError):
            ledger.record_infraction(self.student.pk, '   ')


class ViolationEntryTestCase(DetentionTestCase):
    """Test cases for filing infractions and violations"""

    def test_tardy_end_to_end(self):
        """Two tardy warnings, then a detention bound to the chosen slot"""
        slot = self.make_slot(days_ahead=2)

        first = violations.file_infraction(self.student.pk, self.teacher, 'Tardy')
        second = violations.file_infraction(self.student.pk, self.teacher, 'Tardy')
        with self.captureOnCommitCallbacks(execute=True):
            third = violations.file_infraction(self.student.pk, self.teacher, 'Tardy', slot_id=slot.pk)

        self.assertEqual([first.kind, second.kind, third.kind], ['warning', 'warning', 'violation'])
        violation = third.violation
        self.assertEqual(violation.slot, slot)
        self.assertEqual(violation.detention_date, slot.date)
        self.assertEqual(violation.status, ViolationRecord.Status.PENDING)
        self.assertEqual(violation.assigned_date, self.today)
        self.assertEqual(self.count(slot), 1)
        self.assertEqual(StudentWarning.objects.filter(student=self.student, violation_type='Tardy').count(), 2)

        notice = mail.outbox[0]
        self.assertEqual(notice.to, ['student0@episd.org', 'parent0@home.org'])
        self.assertEqual(notice.cc, ['ms.lee@episd.org'])
        self.assertIn(self.student.parent_access_code, notice.alternatives[0][0])

    def test_violation_needs_a_slot(self):
        """Reaching the threshold without a slot writes nothing"""
        violations.file_infraction(self.student.pk, self.teacher, 'Tardy')
        violations.file_infraction(self.student.pk, self.teacher, 'Tardy')

        with self.assertRaises(ValidationError) as ctx:
            violations.file_infraction(self.student.pk, self.teacher, 'Tardy')

        self.assertEqual(ctx.exception.details, {'field': 'slot'})
        self.assertFalse(ViolationRecord.objects.exists())
        self.assertEqual(StudentWarning.objects.count(), 2)

    def test_full_slot_refuses_violation(self):
        slot = self.make_slot(capacity=1)
        self.assign(self.students[0], slot)

        with self.assertRaises(NoCapacityAvailable):
            self.assign(self.students[1], slot)

        self.assertEqual(ViolationRecord.objects.count(), 1)
        self.assertEqual(self.count(slot), 1)

    def test_past_slot_refused(self):
        slot = self.make_slot(days_ahead=-1)
        with self.assertRaises(ValidationError):
            self.assign(self.student, slot)

    def test_verified_parent_gets_no_access_code(self):
        self.student.mark_parent_verified()
        slot = self.make_slot()

        with self.captureOnCommitCallbacks(execute=True):
            self.assign(self.student, slot)

        self.assertNotIn(self.student.parent_access_code, mail.outbox[0].alternatives[0][0])

    def test_move_violation(self):
        old = self.make_slot(days_ahead=1)
        new = self.make_slot(days_ahead=2)
        violation = self.assign(self.student, old)

        with self.captureOnCommitCallbacks(execute=True):
            moved = violations.move_violation(violation.pk, new.pk, performed_by=self.admin)

        self.assertEqual((moved.slot_id, moved.detention_date), (new.pk, new.date))
        self.assertEqual((self.count(old), self.count(new)), (0, 1))
        self.assertEqual(len(mail.outbox), 1)

    def test_move_rules(self):
        source = self.make_slot(days_ahead=1)
        full = self.make_slot(days_ahead=2, capacity=1)
        self.assign(self.students[1], full)
        violation = self.assign(self.student, source)

        with self.assertRaises(NoCapacityAvailable):
            violations.move_violation(violation.pk, full.pk)
        self.assertEqual((self.count(source), self.count(full)), (1, 1))

        attendance.mark_attendance(violation.pk, ViolationRecord.Status.ATTENDED)
        with self.assertRaises(InvalidTransition):
            violations.move_violation(violation.pk, source.pk)

    def test_import_violations(self):
        """Each row succeeds or fails on its own"""
        slot = self.make_slot(days_ahead=2, capacity=1)
        date_text = slot.date.strftime('%m/%d/%Y')
        rows = [
            {'barcode': self.students[0].barcode, 'violation_type': 'Tardy', 'detention_date': date_text},
            {'barcode': '999999', 'violation_type': 'Tardy', 'detention_date': date_text},
            {'barcode': self.students[1].barcode, 'violation_type': 'Tardy', 'detention_date': 'soon'},
            {'barcode': self.students[2].barcode, 'violation_type': 'Tardy', 'detention_date': date_text},
        ]

        results = violations.import_violations(rows, self.teacher)

        self.assertEqual([result['success'] for result in results], [True, False, False, False])
        self.assertEqual([result.get('code') for result in results[1:]], ['not_found', 'validation_error', 'no_capacity'])
        self.assertEqual(self.count(slot), 1)
        self.assertFalse(StudentWarning.objects.exists())

    def test_import_fills_second_slot_on_same_date(self):
        first = self.make_slot(days_ahead=2, capacity=1)
        second = self.make_slot(days_ahead=2, capacity=1, teacher=self.teacher)
        rows = [
            {'barcode': student.barcode, 'violation_type': 'Tardy', 'detention_date': first.date.isoformat()}
            for student in self.students[:2]
        ]

        results = violations.import_violations(rows, self.teacher)

        self.assertTrue(all(result['success'] for result in results))
        self.assertEqual((self.count(first), self.count(second)), (1, 1))


class AttendanceTestCase(DetentionTestCase):
    """Test cases for attendance marking and automatic rescheduling"""

    def test_mark_attended(self):
        slot = self.make_slot(days_ahead=0)
        violation = self.assign(self.student, slot)

        outcome = attendance.mark_attendance(violation.pk, ViolationRecord.Status.ATTENDED, performed_by=self.monitor)

        self.assertEqual(outcome.status, ViolationRecord.Status.ATTENDED)
        self.assertIsNone(outcome.reassignment)
        log = AuditLog.objects.get(action=AuditLog.ActionType.STATUS_CHANGE)
        self.assertEqual(log.details['from'], 'pending')
        self.assertEqual(log.details['to'], 'attended')
        self.assertEqual(log.user, self.monitor)

    def test_attended_is_final(self):
        violation = self.assign(self.student, self.make_slot(days_ahead=0))
        attendance.mark_attendance(violation.pk, ViolationRecord.Status.ATTENDED)

        with self.assertRaises(InvalidTransition):
            attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)
        with self.assertRaises(ValidationError):
            attendance.mark_attendance(violation.pk, ViolationRecord.Status.PENDING)

    def test_absent_without_capacity_stays_absent(self):
        """No future seat: the absence is kept and the reason reported"""
        today_slot = self.make_slot(days_ahead=0)
        violation = self.assign(self.student, today_slot)
        full = self.make_slot(days_ahead=1, capacity=1, teacher=self.teacher)
        self.assign(self.students[1], full)

        outcome = attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)

        self.assertEqual(outcome.status, ViolationRecord.Status.ABSENT)
        self.assertEqual(outcome.reschedule_error, 'No available detention slots found.')
        violation.refresh_from_db()
        self.assertEqual(violation.status, ViolationRecord.Status.ABSENT)
        self.assertEqual(violation.slot, today_slot)
        self.assertEqual((self.count(today_slot), self.count(full)), (1, 1))

        with self.assertRaises(NoCapacityAvailable):
            allocator.reassign(violation.pk)
        violation.refresh_from_db()
        self.assertEqual(violation.status, ViolationRecord.Status.ABSENT)

    def test_absent_takes_the_one_spare_seat(self):
        """Exactly one slot gains a seat and the violation moves to its date"""
        today_slot = self.make_slot(days_ahead=0)
        violation = self.assign(self.student, today_slot)
        full = self.make_slot(days_ahead=1, capacity=1, teacher=self.teacher)
        self.assign(self.students[1], full)
        spare = self.make_slot(days_ahead=2, capacity=2)
        self.assign(self.students[2], spare)

        with self.captureOnCommitCallbacks(execute=True):
            outcome = attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)

        self.assertEqual(outcome.status, ViolationRecord.Status.REASSIGNED)
        self.assertEqual(outcome.reassignment.new_date, spare.date)
        self.assertEqual(outcome.violation.slot, spare)
        self.assertEqual(outcome.violation.detention_date, spare.date)
        self.assertEqual(outcome.violation.reschedule_count, 1)
        self.assertEqual((self.count(today_slot), self.count(full), self.count(spare)), (1, 1, 2))
        self.assertEqual(outcome.as_dict()['reassigned_to'], spare.date.isoformat())

        rescheduled = [message for message in mail.outbox if message.subject == 'Detention Rescheduled']
        self.assertEqual(len(rescheduled), 1)
        self.assertEqual(rescheduled[0].to, ['student0@episd.org', 'ms.lee@episd.org'])

    def test_reassign_skips_today(self):
        """Only sessions after today are candidates"""
        first = self.make_slot(days_ahead=0)
        violation = self.assign(self.student, first)
        self.make_slot(days_ahead=0, teacher=self.teacher)

        outcome = attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)
        self.assertEqual(outcome.status, ViolationRecord.Status.ABSENT)

    def test_reassign_never_returns_to_the_missed_session(self):
        """A missed future session is not offered back even while it has room"""
        missed = self.make_slot(days_ahead=1)
        violation = self.assign(self.student, missed)

        outcome = attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)

        self.assertEqual(outcome.status, ViolationRecord.Status.ABSENT)
        self.assertEqual(outcome.violation.slot, missed)
        self.assertEqual(self.count(missed), 1)

        later = self.make_slot(days_ahead=2, teacher=self.teacher)
        result = allocator.reassign(violation.pk)

        self.assertEqual(result.slot_id, later.pk)
        self.assertEqual((self.count(missed), self.count(later)), (1, 1))

    def test_reassigned_can_be_missed_again(self):
        origin = self.make_slot(days_ahead=0)
        self.make_slot(days_ahead=1)
        self.make_slot(days_ahead=2, teacher=self.teacher)
        violation = self.assign(self.student, origin)

        attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)
        outcome = attendance.mark_attendance(violation.pk, ViolationRecord.Status.ABSENT)

        self.assertEqual(outcome.status, ViolationRecord.Status.REASSIGNED)
        self.assertEqual(outcome.violation.reschedule_count, 2)

    def test_reassign_requires_absent(self):
        violation = self.assign(self.student, self.make_slot(days_ahead=0))
        self.make_slot(days_ahead=1, teacher=self.teacher)
        with self.assertRaises(InvalidTransition):
            allocator.reassign(violation.pk)

    def test_bulk_absent_with_three_seats(self):
        """Five absences, three seats: three reassigned, two stay absent"""
        origin = self.make_slot(days_ahead=0)
        future = self.make_slot(days_ahead=1, capacity=3, teacher=self.teacher)
        records = [self.assign(student, origin) for student in self.students[:5]]

        results = attendance.mark_bulk([record.pk for record in records], ViolationRecord.Status.ABSENT)

        self.assertEqual([result['violation_id'] for result in results], [str(record.pk) for record in records])
        self.assertEqual([result['success'] for result in results], [True, True, True, False, False])
        self.assertEqual(
            [result['status'] for result in results],
            ['reassigned', 'reassigned', 'reassigned', 'absent', 'absent'],
        )
        self.assertEqual([result.get('code') for result in results[3:]], ['no_capacity', 'no_capacity'])
        self.assertEqual(sum(1 for result in results if 'reschedule_error' in result), 2)
        self.assertEqual(self.count(future), 3)
        self.assertLessEqual(self.count(origin), origin.capacity)

    def test_bulk_reports_failures_per_record(self):
        slot = self.make_slot(days_ahead=0)
        good = self.assign(self.students[0], slot)
        done = self.assign(self.students[1], slot)
        attendance.mark_attendance(done.pk, ViolationRecord.Status.ATTENDED)

        results = attendance.mark_bulk(
            [good.pk, done.pk, '00000000-0000-0000-0000-000000000000'],
            ViolationRecord.Status.ATTENDED,
        )

        self.assertEqual([result['success'] for result in results], [True, False, False])
        self.assertEqual([result.get('code') for result in results[1:]], ['invalid_transition', 'not_found'])

    def test_roster_and_check_in(self):
        slot = self.make_slot(days_ahead=0)
        self.assign(self.students[1], slot)
        violation = self.assign(self.students[0], slot)

        self.assertEqual(
            [record.student.name for record in attendance.session_roster(self.today)],
            ['Student 0', 'Student 1'],
        )

        outcome = attendance.check_in_by_barcode(self.today, self.students[0].barcode)
        self.assertEqual(outcome.violation.pk, violation.pk)
        self.assertEqual(outcome.status, ViolationRecord.Status.ATTENDED)

        with self.assertRaises(NotFound):
            attendance.check_in_by_barcode(self.today, self.students[0].barcode)


class DetentionCommandsTestCase(DetentionTestCase):

    def test_send_monitor_reminders(self):
        slot = self.make_slot(days_ahead=0)
        self.make_slot(days_ahead=0, teacher=self.teacher)
        self.make_slot(days_ahead=1, teacher=self.admin)
        self.assign(self.students[0], slot)
        self.assign(self.students[1], slot)
        mail.outbox = []

        out = StringIO()
        with self.captureOnCommitCallbacks(execute=True):
            call_command('send_monitor_reminders', stdout=out)

        self.assertIn('2 reminder(s) sent', out.getvalue())
        self.assertEqual(sorted(message.to[0] for message in mail.outbox), ['mr.diaz@episd.org', 'ms.lee@episd.org'])
        diaz = next(message for message in mail.outbox if message.to == ['mr.diaz@episd.org'])
        self.assertIn('<strong>Students scheduled:</strong> 2', diaz.alternatives[0][0])

    def test_send_monitor_reminders_bad_date(self):
        with self.assertRaises(CommandError):
            call_command('send_monitor_reminders', date='03/02/2026', stdout=StringIO())

    def test_scan_attendance(self):
        """Scanned ID cards check students in; unknown cards are reported"""
        slot = self.make_slot(days_ahead=0)
        first = self.assign(self.students[0], slot)
        second = self.assign(self.students[1], slot)
        scans = f'{self.students[0].barcode}\n{self.students[0].barcode}\n999999\n{self.students[1].barcode}'

        out = StringIO()
        call_command('scan_attendance', stdin=StringIO(scans), stdout=out)

        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(first.status, ViolationRecord.Status.ATTENDED)
        self.assertEqual(second.status, ViolationRecord.Status.ATTENDED)
        self.assertIn('No student with barcode 999999', out.getvalue())
        self.assertIn('2 student(s) checked in', out.getvalue())


class DetentionAPITestCase(DetentionTestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.client.force_authenticate(self.teacher)

    def test_teachers_read_but_do_not_schedule_slots(self):
        self.make_slot()
        self.assertEqual(self.client.get(reverse('detention:slot-list')).status_code, 200)

        response = self.client.post(
            reverse('detention:slot-list'), {'date': (self.today + timedelta(days=5)).isoformat()}, format='json',
        )
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('detention:slot-list'), {
            'date': (self.today + timedelta(days=5)).isoformat(),
            'teacher': str(self.monitor.pk),
            'capacity': 8,
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['teacher_name'], 'Luis Diaz')
        self.assertEqual(response.data['seats_left'], 8)

    def test_signup_endpoint(self):
        response = self.client.post(reverse('detention:slot-signup'), {
            'dates': [(self.today + timedelta(days=1)).isoformat()],
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data[0]['teacher'], self.teacher.pk)

    def test_available_endpoint(self):
        self.make_slot(days_ahead=1)
        response = self.client.get(reverse('detention:slot-available'), {'days': 'x'})
        self.assertEqual(response.status_code, 400)
        response = self.client.get(reverse('detention:slot-available'), {'days': '7'})
        self.assertEqual(len(response.data), 1)

    def test_infraction_endpoint(self):
        slot = self.make_slot()
        url = reverse('detention:infractions')
        payload = {'student': str(self.student.pk), 'violation_type': 'Tardy'}

        self.assertEqual(self.client.post(url, payload, format='json').data['kind'], 'warning')
        self.assertEqual(self.client.post(url, payload, format='json').data['warning_count'], 2)

        response = self.client.post(url, payload, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'validation_error')

        response = self.client.post(url, dict(payload, slot=str(slot.pk)), format='json')
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['kind'], 'violation')
        self.assertEqual(response.data['violation']['detention_date'], slot.date.isoformat())

    @override_settings(WARNING_THRESHOLD=0)
    def test_full_slot_is_409(self):
        slot = self.make_slot(capacity=1)
        self.assign(self.students[1], slot)

        response = self.client.post(reverse('detention:infractions'), {
            'student': str(self.student.pk), 'violation_type': 'Tardy', 'slot': str(slot.pk),
        }, format='json')

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data['code'], 'no_capacity')
        self.assertFalse(ViolationRecord.objects.filter(student=self.student).exists())

    def test_mark_and_bulk_endpoints(self):
        origin = self.make_slot(days_ahead=0)
        first = self.assign(self.students[0], origin)
        second = self.assign(self.students[1], origin)

        response = self.client.post(reverse('detention:attendance_mark'), {
            'violation': str(first.pk), 'status': 'absent',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'absent')
        self.assertIn('reschedule_error', response.data)

        response = self.client.post(reverse('detention:attendance_bulk'), {
            'violations': [str(first.pk), str(second.pk)], 'status': 'attended',
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual((response.data['successful'], response.data['failed']), (1, 1))

    def test_bulk_absent_counts_unrescheduled_as_failed(self):
        origin = self.make_slot(days_ahead=0)
        self.make_slot(days_ahead=1, capacity=1, teacher=self.teacher)
        records = [self.assign(student, origin) for student in self.students[:2]]

        response = self.client.post(reverse('detention:attendance_bulk'), {
            'violations': [str(record.pk) for record in records], 'status': 'absent',
        }, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual((response.data['successful'], response.data['failed']), (1, 1))
        self.assertEqual(response.data['results'][1]['status'], 'absent')

    def test_violation_list_filters(self):
        slot = self.make_slot(days_ahead=1)
        self.assign(self.students[0], slot)
        self.assign(self.students[1], slot)

        response = self.client.get(reverse('detention:violation-list'), {'student': str(self.students[1].pk)})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)

        response = self.client.get(reverse('detention:violation-list'), {'student': 'not-a-uuid'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'validation_error')

    def test_roster_endpoint(self):
        slot = self.make_slot(days_ahead=0)
        self.assign(self.student, slot)
        response = self.client.get(reverse('detention:attendance_roster'))
        self.assertEqual(response.data['date'], self.today.isoformat())
        self.assertEqual(len(response.data['violations']), 1)

        response = self.client.get(reverse('detention:attendance_roster'), {'date': 'tomorrow'})
        self.assertEqual(response.status_code, 400)

    def test_violation_import_endpoint(self):
        slot = self.make_slot(days_ahead=2)
        response = self.client.post(reverse('detention:violation-import-rows'), {'rows': [
            {'barcode': self.student.barcode, 'violation_type': 'Tardy', 'detention_date': slot.date.isoformat()},
        ]}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['successful'], 1)

    def test_warning_counts_endpoint(self):
        ledger.record_infraction(self.student.pk, 'Tardy')
        response = self.client.get(reverse('detention:warning_counts', args=[self.student.pk]))
        self.assertEqual(response.data['counts'], {'Tardy': 1})
        self.assertEqual(response.data['threshold'], 2)
