# apps/users/tests.py

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from apps.audit.models import AuditLog
from apps.core.exceptions import NotFound, ValidationError
from . import services

User = get_user_model()

PASSWORD = 'Detention-Monitor-2026'


class TeacherServicesTestCase(TestCase):
    """Test cases for teacher registration and approval"""

    def setUp(self):
        """Set up test data"""
        self.admin = User.objects.create_superuser(email='principal@episd.org', password=PASSWORD)

    def test_register_creates_unapproved_teacher(self):
        teacher = services.register_teacher(
            ' Ms.Lee@EPISD.org ', PASSWORD, first_name='Grace', last_name='Lee', classroom_number='B12',
        )

        self.assertEqual(teacher.email, 'ms.lee@episd.org')
        self.assertEqual(teacher.role, User.Role.TEACHER)
        self.assertFalse(teacher.is_approved)
        self.assertFalse(teacher.can_use_monitor)
        self.assertTrue(teacher.check_password(PASSWORD))
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.ActionType.CREATE, object_id=str(teacher.pk)).exists())

    def test_register_rejects_other_domains(self):
        """Only school email addresses may register"""
        with self.assertRaises(ValidationError) as ctx:
            services.register_teacher('someone@gmail.com', PASSWORD)
        self.assertEqual(ctx.exception.details, {'field': 'email'})
        self.assertFalse(User.objects.filter(email='someone@gmail.com').exists())

    @override_settings(TEACHER_EMAIL_DOMAIN='')
    def test_empty_domain_allows_any_address(self):
        teacher = services.register_teacher('someone@gmail.com', PASSWORD)
        self.assertEqual(teacher.email, 'someone@gmail.com')

    def test_register_rejects_duplicates_and_weak_passwords(self):
        services.register_teacher('ms.lee@episd.org', PASSWORD)

        with self.assertRaises(ValidationError):
            services.register_teacher('MS.LEE@episd.org', PASSWORD)
        with self.assertRaises(ValidationError) as ctx:
            services.register_teacher('mr.diaz@episd.org', '123')
        self.assertEqual(ctx.exception.details, {'field': 'password'})

    def test_approve_and_suspend(self):
        """Approval opens the monitor, emails the teacher and is audited"""
        teacher = services.register_teacher('ms.lee@episd.org', PASSWORD, first_name='Grace', last_name='Lee')

        with self.captureOnCommitCallbacks(execute=True):
            approved = services.set_approval(teacher.pk, True, performed_by=self.admin)

        self.assertTrue(approved.is_approved)
        self.assertIsNotNone(approved.approved_at)
        self.assertTrue(approved.can_use_monitor)
        self.assertEqual(mail.outbox[0].to, ['ms.lee@episd.org'])
        self.assertIn('Grace Lee', mail.outbox[0].alternatives[0][0])
        log = AuditLog.objects.get(action=AuditLog.ActionType.APPROVE)
        self.assertEqual(log.user, self.admin)

        with self.captureOnCommitCallbacks(execute=True):
            suspended = services.set_approval(teacher.pk, False, performed_by=self.admin)

        self.assertFalse(suspended.is_approved)
        self.assertIsNone(suspended.approved_at)
        self.assertEqual(len(mail.outbox), 2)
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.ActionType.SUSPEND).exists())

    def test_set_approval_unknown_teacher(self):
        with self.assertRaises(NotFound):
            services.set_approval('not-a-uuid', True)

    def test_change_role(self):
        teacher = services.register_teacher('ms.lee@episd.org', PASSWORD)

        promoted = services.change_role(teacher.pk, User.Role.ADMIN, performed_by=self.admin)
        self.assertTrue(promoted.is_admin_user)
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.ActionType.ROLE_CHANGE).exists())

        with self.assertRaises(ValidationError):
            services.change_role(teacher.pk, 'janitor', performed_by=self.admin)

    def test_admin_cannot_demote_self(self):
        with self.assertRaises(ValidationError):
            services.change_role(self.admin.pk, User.Role.TEACHER, performed_by=self.admin)

    def test_pending_teachers(self):
        pending = services.register_teacher('ms.lee@episd.org', PASSWORD)
        approved = services.register_teacher('mr.diaz@episd.org', PASSWORD)
        services.set_approval(approved.pk, True, performed_by=self.admin)

        self.assertEqual(list(services.pending_teachers()), [pending])


class AuthAPITestCase(TestCase):
    """Test cases for login, registration and the teacher admin endpoints"""

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.admin = User.objects.create_superuser(email='principal@episd.org', password=PASSWORD)
        self.teacher = User.objects.create_user(email='ms.lee@episd.org', password=PASSWORD, first_name='Grace')

    def test_login_with_email_any_case(self):
        response = self.client.post(
            reverse('users:login'),
            {'email': 'MS.LEE@episd.org', 'password': PASSWORD},
            format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['email'], 'ms.lee@episd.org')
        self.assertFalse(response.data['is_approved'])

        me = self.client.get(reverse('users:me'))
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.data['first_name'], 'Grace')

    def test_login_wrong_password(self):
        response = self.client.post(
            reverse('users:login'),
            {'email': 'ms.lee@episd.org', 'password': 'wrong'},
            format='json',
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data['code'], 'invalid_credentials')

    def test_register_endpoint(self):
        response = self.client.post(
            reverse('users:register'),
            {'email': 'mr.diaz@episd.org', 'password': PASSWORD, 'classroom_number': 'C4'},
            format='json',
        )
        self.assertEqual(response.status_code, 201)
        self.assertFalse(response.data['is_approved'])

        response = self.client.post(
            reverse('users:register'),
            {'email': 'mr.diaz@gmail.com', 'password': PASSWORD},
            format='json',
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'validation_error')

    def test_me_cannot_change_role(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.patch(reverse('users:me'), {'role': 'admin', 'last_name': 'Lee'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.teacher.refresh_from_db()
        self.assertEqual(self.teacher.role, User.Role.TEACHER)
        self.assertEqual(self.teacher.last_name, 'Lee')

    def test_only_admins_manage_teachers(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get(reverse('users:teacher-list'))
        self.assertEqual(response.status_code, 403)

        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse('users:teacher-list'), {'pending': '1'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row['email'] for row in response.data], ['ms.lee@episd.org'])

    def test_approve_endpoint(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('users:teacher-approve', args=[self.teacher.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['is_approved'])

    def test_admin_cannot_suspend_self(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(reverse('users:teacher-suspend', args=[self.admin.pk]))
        self.assertEqual(response.status_code, 400)

    def test_role_endpoint(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post(
            reverse('users:teacher-role', args=[self.teacher.pk]), {'role': 'admin'}, format='json',
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['is_admin'])
