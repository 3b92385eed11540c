#!/usr/bin/env python
"""
Management command to load students from a CSV or Excel roster.
"""

import os

from django.core.files import File
from django.core.management.base import BaseCommand, CommandError

from apps.core.exceptions import ValidationError
from apps.students.services import import_students


class Command(BaseCommand):
    help = 'Import students from a CSV or Excel file (columns: name, email, barcode, grade, parent_email)'

    def add_arguments(self, parser):
        parser.add_argument(
            'path',
            type=str,
            help='Path to the .csv or .xlsx roster'
        )

    def handle(self, *args, **options):
        path = options['path']
        if not os.path.exists(path):
            raise CommandError(f'File not found: {path}')

        try:
            with open(path, 'rb') as handle:
                results = import_students(File(handle, name=os.path.basename(path)))
        except ValidationError as e:
            raise CommandError(e.message)

        for result in results:
            if result['success']:
                self.stdout.write(f"  ✓ Row {result['row']}: {result['barcode']}")
            else:
                self.stdout.write(self.style.ERROR(f"  ✗ Row {result['row']}: {result['error']}"))

        created = sum(1 for result in results if result['success'])
        self.stdout.write(self.style.SUCCESS(f'{created} of {len(results)} student(s) imported'))
