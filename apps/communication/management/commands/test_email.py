"""
Management command to test email functionality.
"""

from django.core.management.base import BaseCommand, CommandError
from django.conf import settings

from apps.communication.models import EventKind
from apps.communication.services import EmailService, EmailTemplateService


class Command(BaseCommand):
    help = 'Test email functionality and configuration'

    def add_arguments(self, parser):
        parser.add_argument(
            '--email',
            type=str,
            help='Email address to send test email to (defaults to DEFAULT_FROM_EMAIL)',
        )
        parser.add_argument(
            '--template',
            type=str,
            default=EventKind.TEST.value,
            help='Name of email template to render (defaults to the test template)',
        )
        parser.add_argument(
            '--connection-only',
            action='store_true',
            help='Only test email connection, do not send test email',
        )
        parser.add_argument(
            '--create-templates',
            action='store_true',
            help='Store the built-in email templates in the database if they do not exist',
        )

    def handle(self, *args, **options):
        self.stdout.write(
            self.style.SUCCESS('Testing Email Configuration')
        )
        self.stdout.write('=' * 50)
        self.stdout.write(f'Backend: {settings.EMAIL_BACKEND}')

        self.stdout.write('1. Testing email connection...')
        success, message = EmailService.test_email_connection()

        if success:
            self.stdout.write(self.style.SUCCESS(f'   ✓ {message}'))
        else:
            self.stdout.write(self.style.ERROR(f'   ✗ {message}'))
            return

        if options['connection_only']:
            return

        test_email = options.get('email') or settings.DEFAULT_FROM_EMAIL
        self.stdout.write(f'2. Test email address: {test_email}')

        if options['create_templates']:
            created = EmailTemplateService.seed_defaults()
            for template in created:
                self.stdout.write(f'   ✓ Created template: {template.name}')
            if not created:
                self.stdout.write('   - All templates already exist')

        self.test_template_email(options['template'], test_email)

        self.stdout.write(self.style.SUCCESS('\nEmail testing completed!'))

    def test_template_email(self, template_name, test_email):
        """Send a test email using a template, filling every variable with a marker."""
        self.stdout.write(f'3. Testing template: {template_name}')

        template = EmailTemplateService.get_template_by_name(template_name)
        if not template:
            raise CommandError(f'Template "{template_name}" not found or not active.')

        context = {name: f'[{name}]' for name in template.variables}
        context['school_name'] = getattr(settings, 'SCHOOL_NAME', 'School')

        success, message, sent_email = EmailService.send_templated_email(
            template=template,
            recipients=[test_email],
            context=context,
            event_kind=template_name,
        )

        if success:
            self.stdout.write(self.style.SUCCESS(f'   ✓ {message}'))
            if sent_email:
                self.stdout.write(f'   - Email ID: {sent_email.id}')
                self.stdout.write(f'   - Template: {template.name}')
        else:
            self.stdout.write(self.style.ERROR(f'   ✗ {message}'))
