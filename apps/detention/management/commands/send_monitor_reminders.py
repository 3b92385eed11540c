"""
Morning reminder for detention monitors; meant to be run from cron.
"""

from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.detention.slots import send_monitor_reminders


class Command(BaseCommand):
    help = 'Email every teacher on detention duty today (or on --date)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            type=str,
            help='Duty date in YYYY-MM-DD format (defaults to today)',
        )

    def handle(self, *args, **options):
        day = None
        if options.get('date'):
            try:
                day = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date '{options['date']}', expected YYYY-MM-DD.")

        queued = send_monitor_reminders(day)
        self.stdout.write(self.style.SUCCESS(f'{queued} reminder(s) sent'))
