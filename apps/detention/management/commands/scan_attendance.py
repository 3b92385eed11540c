"""
Check students in to detention with a keyboard-wedge barcode scanner.

Run it on the monitor's machine and scan ID cards; each scan marks the
student attended for today's session.
"""

import sys
from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.core.exceptions import ServiceError
from apps.detention.attendance import check_in_by_barcode
from apps.students.scanning import ScanBuffer


class Command(BaseCommand):
    help = 'Read barcode scans from standard input and check students in to detention'
    stealth_options = ('stdin',)

    def add_arguments(self, parser):
        parser.add_argument('--date', type=str, help='Session date in YYYY-MM-DD format (defaults to today)')
        parser.add_argument('--timeout', type=float, default=0.1, help='Seconds of silence that end a scan')
        parser.add_argument('--repeat-window', type=float, default=2.0, help='Seconds in which a repeated scan is ignored')

    def handle(self, *args, **options):
        session_date = timezone.localdate()
        if options.get('date'):
            try:
                session_date = date.fromisoformat(options['date'])
            except ValueError:
                raise CommandError(f"Invalid date '{options['date']}', expected YYYY-MM-DD.")

        buffer = ScanBuffer(timeout=options['timeout'], repeat_window=options['repeat_window'])
        stream = options.get('stdin') or sys.stdin
        self.stdout.write(self.style.SUCCESS(f'Scanning for detention on {session_date}. Press Ctrl-D to stop.'))

        checked_in = 0
        try:
            for char in iter(lambda: stream.read(1), ''):
                barcode = buffer.feed(char)
                if barcode and self.check_in(session_date, barcode):
                    checked_in += 1
        except KeyboardInterrupt:
            pass

        barcode = buffer.poll() or buffer.feed('\n')
        if barcode and self.check_in(session_date, barcode):
            checked_in += 1
        self.stdout.write(f'{checked_in} student(s) checked in')

    def check_in(self, session_date, barcode):
        try:
            outcome = check_in_by_barcode(session_date, barcode)
        except ServiceError as e:
            self.stdout.write(self.style.ERROR(f'  ✗ {barcode}: {e.message}'))
            return False
        self.stdout.write(self.style.SUCCESS(f'  ✓ {outcome.violation.student.name} checked in'))
        return True
