# apps/students/tests.py

import os
import tempfile
from datetime import timedelta
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.core.exceptions import NotFound, ValidationError
from apps.detention.models import DetentionSlot, StudentWarning, ViolationRecord
from . import services
from .models import Student
from .scanning import ScanBuffer

User = get_user_model()


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class StudentModelTestCase(TestCase):

    def test_access_code_generated_on_save(self):
        """Every student gets a parent access code like AB123456"""
        student = Student.objects.create(name='Ana Ruiz', email='ana@episd.org', barcode='123456', grade=9)
        self.assertRegex(student.parent_access_code, r'^[A-Z]{2}\d{6}$')

    def test_search_is_case_insensitive_and_limited(self):
        for index in range(7):
            Student.objects.create(name=f'Smith {index}', email=f's{index}@episd.org', barcode=f'10000{index}', grade=10)
        Student.objects.create(name='Jones', email='j@episd.org', barcode='200000', grade=10)

        results = services.search_students('SMITH')
        self.assertEqual(len(results), 5)
        self.assertEqual(results[0].name, 'Smith 0')
        self.assertEqual(list(services.search_students('  ')), [])


class StudentServicesTestCase(TestCase):
    """Test cases for student import, export and the parent portal"""

    def setUp(self):
        """Set up test data"""
        self.student = Student.objects.create(
            name='Ana Ruiz', email='ana@episd.org', parent_email='parent@home.org', barcode='123456', grade=11,
        )

    def test_get_by_barcode(self):
        self.assertEqual(services.get_by_barcode(' 123456 '), self.student)
        with self.assertRaises(NotFound):
            services.get_by_barcode('999999')

    def test_import_students_reports_each_row(self):
        """Good rows are saved even when others fail"""
        upload = SimpleUploadedFile('students.csv', (
            'name,email,barcode,grade,parent_email\n'
            'Ben Ortiz,ben@episd.org,4321,10,mom@home.org\n'
            'Cara Diaz,cara@episd.org,123456,9,\n'
            'Dan Cho,not-an-email,555555,12,\n'
            'Eva Park,eva@episd.org,666666,seven,\n'
        ).encode('utf-8'))

        results = services.import_students(upload)

        self.assertEqual([result['success'] for result in results], [True, False, False, False])
        self.assertEqual([result['row'] for result in results], [2, 3, 4, 5])
        self.assertIn('already exists', results[1]['error'])
        self.assertIn('email', results[2]['error'])

        ben = Student.objects.get(barcode='004321')
        self.assertEqual(ben.parent_email, 'mom@home.org')
        self.assertEqual(Student.objects.count(), 2)

    def test_import_students_command(self):
        with tempfile.NamedTemporaryFile('w', suffix='.csv', delete=False) as handle:
            handle.write('name,email,barcode,grade\nBen Ortiz,ben@episd.org,654321,10\nAna Ruiz,ana@episd.org,123456,11\n')
        self.addCleanup(os.remove, handle.name)

        out = StringIO()
        call_command('import_students', handle.name, stdout=out)

        self.assertTrue(Student.objects.filter(barcode='654321').exists())
        self.assertIn('1 of 2 student(s) imported', out.getvalue())
        with self.assertRaises(CommandError):
            call_command('import_students', handle.name + '.missing', stdout=StringIO())

    def test_import_latin1_csv(self):
        upload = SimpleUploadedFile(
            'students.csv',
            'name,email,barcode,grade\nJosé Peña,jose@episd.org,654321,10\n'.encode('latin-1'),
        )
        results = services.import_students(upload)

        self.assertTrue(results[0]['success'])
        self.assertEqual(Student.objects.get(barcode='654321').name, 'José Peña')

    def test_import_unreadable_file_is_rejected(self):
        upload = SimpleUploadedFile('students.xlsx', b'not really a spreadsheet')
        with self.assertRaises(ValidationError):
            services.import_students(upload)

    def test_import_rejects_missing_columns(self):
        upload = SimpleUploadedFile('students.csv', b'name,email\nBen,ben@episd.org\n')
        with self.assertRaises(ValidationError):
            services.import_students(upload)

    def test_export_students(self):
        lines = services.export_students().splitlines()
        self.assertEqual(lines[0], 'name,email,parent_email,barcode,grade,parent_access_code,parent_verified')
        self.assertTrue(lines[1].startswith('Ana Ruiz,ana@episd.org,parent@home.org,123456,11,'))

    def test_verify_access_code_marks_parent_verified(self):
        """The first successful lookup verifies the parent"""
        student, history = services.verify_access_code(self.student.parent_access_code.lower())

        self.assertEqual(student, self.student)
        self.assertTrue(student.parent_verified)
        self.assertIsNotNone(student.parent_verified_at)
        self.assertEqual(history['violations'], [])
        verified_at = student.parent_verified_at

        student, _ = services.verify_access_code(self.student.parent_access_code)
        self.assertEqual(student.parent_verified_at, verified_at)

    def test_verify_invalid_code(self):
        with self.assertRaises(NotFound):
            services.verify_access_code('ZZ000000')
        with self.assertRaises(ValidationError):
            services.verify_access_code('')

    def test_regenerate_access_code(self):
        old_code = self.student.parent_access_code
        self.student.mark_parent_verified()

        student = services.regenerate_access_code(self.student)

        self.assertNotEqual(student.parent_access_code, old_code)
        self.assertFalse(student.parent_verified)
        with self.assertRaises(NotFound):
            services.verify_access_code(old_code)

    def test_history_includes_warnings_and_violations(self):
        teacher = User.objects.create_user(email='ms.lee@episd.org', password='x', is_approved=True)
        slot = DetentionSlot.objects.create(teacher=teacher, date=timezone.localdate() + timedelta(days=1))
        ViolationRecord.objects.create(
            student=self.student, teacher=teacher, violation_type='Tardy', detention_date=slot.date, slot=slot,
        )
        StudentWarning.objects.create(student=self.student, teacher=teacher, violation_type='Tardy')
        StudentWarning.objects.create(student=self.student, teacher=teacher, violation_type='Improper phone use')

        history = services.student_history(self.student)

        self.assertEqual(len(history['violations']), 1)
        self.assertEqual(len(history['warnings']), 2)
        self.assertEqual(history['warning_counts'], {'Improper phone use': 1, 'Tardy': 1})


class StudentAPITestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.teacher = User.objects.create_user(email='ms.lee@episd.org', password='x', is_approved=True)
        self.pending = User.objects.create_user(email='mr.new@episd.org', password='x')
        self.admin = User.objects.create_superuser(email='principal@episd.org', password='x')
        self.student = Student.objects.create(name='Ana Ruiz', email='ana@episd.org', barcode='123456', grade=9)

    def test_unapproved_teacher_is_refused(self):
        self.client.force_authenticate(self.pending)
        response = self.client.get(reverse('students:student-list'))
        self.assertEqual(response.status_code, 403)

    def test_create_and_lookup(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(reverse('students:student-list'), {
            'name': 'Ben Ortiz', 'email': 'ben@episd.org', 'barcode': '654321', 'grade': 10,
            'parent_access_code': 'AA000000',
        }, format='json')
        self.assertEqual(response.status_code, 201)
        self.assertNotEqual(response.data['parent_access_code'], 'AA000000')

        response = self.client.get(reverse('students:student-by-barcode', args=['654321']))
        self.assertEqual(response.data['name'], 'Ben Ortiz')
        self.assertEqual(response.data['grade_display'], '10th grade')

    def test_invalid_barcode_rejected(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.post(reverse('students:student-list'), {
            'name': 'Ben Ortiz', 'email': 'ben@episd.org', 'barcode': '12AB', 'grade': 10,
        }, format='json')
        self.assertEqual(response.status_code, 400)

    def test_only_admins_delete(self):
        self.client.force_authenticate(self.teacher)
        url = reverse('students:student-detail', args=[self.student.pk])
        self.assertEqual(self.client.delete(url).status_code, 403)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.delete(url).status_code, 204)

    def test_import_endpoint(self):
        self.client.force_authenticate(self.teacher)
        upload = SimpleUploadedFile('students.csv', b'name,email,barcode,grade\nBen,ben@episd.org,654321,10\n')
        response = self.client.post(reverse('students:student-import-file'), {'file': upload}, format='multipart')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['successful'], 1)

    def test_export_endpoint(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get(reverse('students:student-export'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv')
        self.assertIn(b'Ana Ruiz', response.content)

    def test_parent_portal_is_anonymous(self):
        response = self.client.post(
            reverse('students:parent_portal_verify'),
            {'code': self.student.parent_access_code},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['student']['name'], 'Ana Ruiz')
        self.assertNotIn('email', response.data['student'])

        response = self.client.post(reverse('students:parent_portal_verify'), {'code': 'ZZ000000'}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['code'], 'not_found')


class ScanBufferTestCase(SimpleTestCase):
    """Test cases for keyboard-wedge scanner input"""

    def setUp(self):
        self.clock = FakeClock()
        self.buffer = ScanBuffer(timeout=0.1, repeat_window=2.0, clock=self.clock)

    def test_enter_completes_barcode(self):
        self.assertEqual(self.buffer.feed_text('123456\n'), ['123456'])

    def test_pause_completes_barcode(self):
        """A scanner without an Enter suffix is detected by the pause"""
        self.buffer.feed_text('123456')
        self.assertIsNone(self.buffer.poll())

        self.clock.advance(0.5)
        self.assertEqual(self.buffer.poll(), '123456')
        self.assertIsNone(self.buffer.poll())

    def test_keystroke_after_pause_starts_new_code(self):
        self.buffer.feed_text('111111')
        self.clock.advance(0.5)
        self.assertEqual(self.buffer.feed('2'), '111111')
        self.assertEqual(self.buffer.feed_text('22222\r'), ['222222'])

    def test_repeated_scan_is_dropped(self):
        self.assertEqual(self.buffer.feed_text('123456\n123456\n'), ['123456'])

        self.clock.advance(3)
        self.assertEqual(self.buffer.feed_text('123456\n'), ['123456'])

    def test_blank_enter_is_ignored(self):
        self.assertEqual(self.buffer.feed_text('\n\n \n'), [])
