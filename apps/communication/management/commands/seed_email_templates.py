from django.core.management.base import BaseCommand

from apps.communication.services import EmailTemplateService


class Command(BaseCommand):
    help = 'Store the built-in notification templates in the database so they can be edited'

    def add_arguments(self, parser):
        parser.add_argument(
            '--overwrite',
            action='store_true',
            help='Replace templates that already exist with the built-in versions',
        )

    def handle(self, *args, **options):
        templates = EmailTemplateService.seed_defaults(overwrite=options['overwrite'])
        for template in templates:
            self.stdout.write(f'  ✓ {template.name}')
        self.stdout.write(self.style.SUCCESS(f'{len(templates)} email template(s) stored'))
