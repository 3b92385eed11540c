# apps/communication/tests.py

from io import StringIO
from unittest import mock

import requests
from django.contrib.auth import get_user_model
from django.core import mail
from django.core.mail import EmailMultiAlternatives
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from .backends import RESEND_API_URL, ResendEmailBackend
from .defaults import DEFAULT_TEMPLATES
from .models import EmailTemplate, EventKind, SentEmail
from .notifications import dispatcher
from .services import EmailService, EmailTemplateService

User = get_user_model()


@override_settings(SCHOOL_NAME='Franklin High')
class NotificationDispatcherTestCase(TestCase):
    """Test cases for queued notifications"""

    def test_send_delivers_after_commit(self):
        """Nothing goes out until the transaction commits"""
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            dispatcher.send(EventKind.TEACHER_APPROVED, {
                'recipients': ['ms.lee@episd.org'],
                'context': {'teacher_name': 'Ms. Lee'},
            })
            self.assertEqual(len(mail.outbox), 0)

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ['ms.lee@episd.org'])
        self.assertEqual(message.subject, 'Franklin High Monitor Account Approved')
        self.assertIn('Dear Ms. Lee', message.alternatives[0][0])

        sent = SentEmail.objects.get()
        self.assertTrue(sent.success)
        self.assertEqual(sent.event_kind, EventKind.TEACHER_APPROVED)
        self.assertIsNone(sent.template)

    def test_database_template_overrides_default(self):
        """An active template stored by an administrator wins over the built-in one"""
        template = EmailTemplate.objects.create(
            name=EventKind.TEACHER_SUSPENDED,
            subject='Access paused for {{ teacher_name }}',
            body_html='<p>{{ teacher_name }}, please see the office.</p>',
            variables=['teacher_name'],
        )

        with self.captureOnCommitCallbacks(execute=True):
            dispatcher.send(EventKind.TEACHER_SUSPENDED, {
                'recipients': ['mr.diaz@episd.org'],
                'context': {'teacher_name': 'Mr. Diaz'},
            })

        self.assertEqual(mail.outbox[0].subject, 'Access paused for Mr. Diaz')
        self.assertEqual(mail.outbox[0].body, 'Mr. Diaz, please see the office.')
        self.assertEqual(SentEmail.objects.get().template, template)

    def test_inactive_template_falls_back_to_default(self):
        EmailTemplate.objects.create(
            name=EventKind.TEACHER_APPROVED,
            subject='Old subject',
            body_html='<p>old</p>',
            is_active=False,
        )

        with self.captureOnCommitCallbacks(execute=True):
            dispatcher.send(EventKind.TEACHER_APPROVED, {
                'recipients': ['ms.lee@episd.org'],
                'context': {'teacher_name': 'Ms. Lee'},
            })

        self.assertEqual(mail.outbox[0].subject, 'Franklin High Monitor Account Approved')

    def test_unknown_event_is_absorbed(self):
        """A failed delivery is logged and reported, never raised"""
        message = dispatcher.send('no_such_event', {'recipients': ['a@b.org']})
        self.assertFalse(dispatcher.deliver(message))
        self.assertEqual(len(mail.outbox), 0)

    def test_backend_failure_is_absorbed(self):
        with mock.patch.object(EmailMultiAlternatives, 'send', side_effect=OSError('connection refused')):
            message = dispatcher.send(EventKind.TEACHER_APPROVED, {
                'recipients': ['ms.lee@episd.org'],
                'context': {'teacher_name': 'Ms. Lee'},
            })
            self.assertFalse(dispatcher.deliver(message))

        sent = SentEmail.objects.get()
        self.assertFalse(sent.success)
        self.assertIn('connection refused', sent.error_message)

    def test_school_name_added_to_context(self):
        message = dispatcher.send(EventKind.TEST, {'recipients': ['a@b.org']})
        self.assertEqual(message.context['school_name'], 'Franklin High')


class EmailServiceTestCase(TestCase):

    def test_blank_recipients_are_dropped(self):
        success, detail, sent = EmailService.send_email(['', 'parent@home.org'], 'Hello', '<p>Hi</p>', cc=[''])
        self.assertTrue(success)
        self.assertEqual(mail.outbox[0].to, ['parent@home.org'])
        self.assertEqual(mail.outbox[0].cc, [])
        self.assertEqual(sent.recipients, ['parent@home.org'])

    def test_no_recipients(self):
        self.assertEqual(EmailService.send_email(['', ''], 'Hello', '<p>Hi</p>'), (False, 'No recipients', None))
        self.assertFalse(SentEmail.objects.exists())

    def test_render_escapes_html_body_only(self):
        template = EmailTemplateService.default_template(EventKind.DETENTION_RESCHEDULED)
        subject, body_html, body_text = template.render_template({
            'student_name': 'Ana <b>Ruiz</b>',
            'detention_date': 'Monday, March 2, 2026',
        })
        self.assertEqual(subject, 'Detention Rescheduled')
        self.assertIn('Ana &lt;b&gt;Ruiz&lt;/b&gt;', body_html)
        self.assertIn('Monday, March 2, 2026', body_text)


class EmailTemplateServiceTestCase(TestCase):

    def test_seed_defaults_once(self):
        """Seeding twice without overwrite leaves edited templates alone"""
        created = EmailTemplateService.seed_defaults()
        self.assertEqual(len(created), len(DEFAULT_TEMPLATES))

        EmailTemplate.objects.filter(name=EventKind.TEST).update(subject='Edited')
        self.assertEqual(EmailTemplateService.seed_defaults(), [])
        self.assertEqual(EmailTemplate.objects.get(name=EventKind.TEST).subject, 'Edited')

        EmailTemplateService.seed_defaults(overwrite=True)
        self.assertNotEqual(EmailTemplate.objects.get(name=EventKind.TEST).subject, 'Edited')

    def test_preview_shows_variable_markers(self):
        template = EmailTemplateService.default_template(EventKind.MONITOR_REMINDER)
        subject, body_html = EmailTemplateService.preview(template)
        self.assertEqual(subject, 'Detention Monitor Duty Reminder')
        self.assertIn('[student_count]', body_html)

    def test_every_event_has_a_default(self):
        for kind in EventKind.values:
            self.assertIsNotNone(EmailTemplateService.default_template(kind), kind)


class ResendEmailBackendTestCase(TestCase):
    """Test cases for the Resend HTTP email backend"""

    def setUp(self):
        patcher = mock.patch('apps.communication.backends.requests.Session')
        self.session = patcher.start().return_value
        self.addCleanup(patcher.stop)
        self.session.post.return_value.json.return_value = {'id': 'resend-123'}

        self.message = EmailMultiAlternatives(
            subject='Detention Notice',
            body='plain text',
            from_email='monitor@episd.org',
            to=['student@episd.org'],
            cc=['teacher@episd.org'],
        )
        self.message.attach_alternative('<p>html</p>', 'text/html')

    def test_send_posts_message(self):
        backend = ResendEmailBackend(api_key='re_test')
        self.assertEqual(backend.send_messages([self.message]), 1)

        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], RESEND_API_URL)
        self.assertEqual(kwargs['json'], {
            'from': 'monitor@episd.org',
            'to': ['student@episd.org'],
            'subject': 'Detention Notice',
            'text': 'plain text',
            'cc': ['teacher@episd.org'],
            'html': '<p>html</p>',
        })
        self.session.headers.update.assert_called_once_with({
            'Authorization': 'Bearer re_test',
            'Content-Type': 'application/json',
        })
        self.assertEqual(self.message.extra_headers['Message-ID'], 'resend-123')
        self.session.close.assert_called_once()

    def test_failure_raises_unless_silent(self):
        self.session.post.side_effect = requests.ConnectionError('down')

        with self.assertRaises(requests.ConnectionError):
            ResendEmailBackend(api_key='re_test').send_messages([self.message])

        self.assertEqual(
            ResendEmailBackend(api_key='re_test', fail_silently=True).send_messages([self.message]),
            0,
        )

    def test_empty_batch(self):
        self.assertEqual(ResendEmailBackend(api_key='re_test').send_messages([]), 0)
        self.session.post.assert_not_called()


class CommunicationCommandsTestCase(TestCase):

    def test_seed_email_templates(self):
        out = StringIO()
        call_command('seed_email_templates', stdout=out)
        self.assertEqual(EmailTemplate.objects.count(), len(DEFAULT_TEMPLATES))
        self.assertIn(f'{len(DEFAULT_TEMPLATES)} email template(s) stored', out.getvalue())

    def test_test_email_sends_marker_template(self):
        out = StringIO()
        call_command('test_email', email='office@episd.org', template=EventKind.MONITOR_REMINDER.value, stdout=out)

        self.assertEqual(mail.outbox[0].to, ['office@episd.org'])
        self.assertIn('[teacher_name]', mail.outbox[0].alternatives[0][0])
        self.assertIn('Email testing completed!', out.getvalue())


class EmailTemplateAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(
            email='admin@episd.org', password='testpass123', role=User.Role.ADMIN, is_approved=True,
        )
        self.teacher = User.objects.create_user(
            email='teacher@episd.org', password='testpass123', is_approved=True,
        )
        self.template = EmailTemplate.objects.create(
            name=EventKind.TEST,
            subject='Test for {{ school_name }}',
            body_html='<p>Hello {{ school_name }}</p>',
            variables=['school_name'],
        )

    def test_teachers_cannot_edit_templates(self):
        self.client.force_authenticate(self.teacher)
        response = self.client.get(reverse('communication:email-template-list'))
        self.assertEqual(response.status_code, 403)

    def test_preview(self):
        self.client.force_authenticate(self.admin)
        response = self.client.get(reverse('communication:email-template-preview', args=[self.template.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['subject'], 'Test for [school_name]')

    def test_failed_emails_filter(self):
        SentEmail.objects.create(recipients=['a@b.org'], subject='ok', body_html='', success=True)
        SentEmail.objects.create(recipients=['a@b.org'], subject='bad', body_html='', success=False)
        self.client.force_authenticate(self.admin)

        response = self.client.get(reverse('communication:sent-email-list'), {'failed': '1'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual([row['subject'] for row in response.data], ['bad'])
