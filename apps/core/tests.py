# apps/core/tests.py

import io
from datetime import datetime

import openpyxl
from django.core.files.uploadedfile import SimpleUploadedFile
from django.db import DatabaseError
from django.test import SimpleTestCase

from .exceptions import NoCapacityAvailable, PersistenceError, ValidationError, persistence_guard
from .spreadsheets import normalize_header, read_rows, write_csv


def xlsx_upload(rows, name='upload.xlsx'):
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return SimpleUploadedFile(name, buffer.getvalue())


class SpreadsheetTestCase(SimpleTestCase):
    """Test cases for reading and writing import/export files"""

    def test_normalize_header(self):
        """Column titles are lowercased with spaces and dashes replaced"""
        self.assertEqual(normalize_header(' Parent Email '), 'parent_email')
        self.assertEqual(normalize_header('Violation-Type'), 'violation_type')
        self.assertEqual(normalize_header(None), '')

    def test_read_csv_with_bom_and_blank_rows(self):
        """CSV files exported from Excel keep working"""
        upload = SimpleUploadedFile(
            'students.csv',
            '\ufeffName,Email,Barcode,Grade\nAna Ruiz,ana@school.org,123456,9\n,,,\n'.encode('utf-8'),
        )
        rows = read_rows(upload, required_columns=['name', 'barcode'])

        self.assertEqual(rows, [
            {'name': 'Ana Ruiz', 'email': 'ana@school.org', 'barcode': '123456', 'grade': '9'},
        ])

    def test_read_excel_converts_cells_to_text(self):
        """Numbers lose their decimal part and dates become ISO strings"""
        upload = xlsx_upload([
            ['Barcode', 'Violation Type', 'Detention Date'],
            [123456, 'Tardy', datetime(2026, 3, 2)],
        ])
        rows = read_rows(upload, required_columns=['barcode', 'violation_type', 'detention_date'])

        self.assertEqual(rows, [
            {'barcode': '123456', 'violation_type': 'Tardy', 'detention_date': '2026-03-02'},
        ])

    def test_read_windows_1252_csv(self):
        """CSV saved by Excel in the Windows code page still imports"""
        upload = SimpleUploadedFile('students.csv', 'name,barcode\nJosé Núñez,123456\n'.encode('cp1252'))
        rows = read_rows(upload, required_columns=['name', 'barcode'])
        self.assertEqual(rows, [{'name': 'José Núñez', 'barcode': '123456'}])

    def test_undecodable_csv(self):
        upload = SimpleUploadedFile('students.csv', b'name,barcode\n\x81\x8d,123456\n')
        with self.assertRaises(ValidationError) as ctx:
            read_rows(upload, required_columns=['name'])
        self.assertIn('Could not read', ctx.exception.message)

    def test_corrupt_excel_file(self):
        upload = SimpleUploadedFile('students.xlsx', b'this is not a workbook')
        with self.assertRaises(ValidationError):
            read_rows(upload, required_columns=['name'])

    def test_unsupported_format(self):
        upload = SimpleUploadedFile('students.txt', b'name\n')
        with self.assertRaises(ValidationError):
            read_rows(upload)

    def test_missing_columns(self):
        """Missing required columns are named in the error"""
        upload = SimpleUploadedFile('students.csv', b'name,email\nAna,ana@school.org\n')
        with self.assertRaises(ValidationError) as ctx:
            read_rows(upload, required_columns=['name', 'barcode', 'grade'])
        self.assertIn('barcode, grade', ctx.exception.message)

    def test_empty_file(self):
        upload = SimpleUploadedFile('students.csv', b'')
        self.assertEqual(read_rows(upload, required_columns=['name']), [])

    def test_write_csv(self):
        content = write_csv(['name', 'grade'], [['Ana', 9], ['Ben', None]])
        self.assertEqual(content.splitlines(), ['name,grade', 'Ana,9', 'Ben,'])


class ServiceErrorTestCase(SimpleTestCase):

    def test_defaults_and_details(self):
        error = NoCapacityAvailable(slot='abc')
        self.assertEqual(error.status_code, 409)
        self.assertEqual(error.code, 'no_capacity')
        self.assertEqual(error.message, 'No available detention slots found.')
        self.assertEqual(error.details, {'slot': 'abc'})

    def test_persistence_guard_wraps_database_errors(self):
        """Database failures surface as PersistenceError"""
        with self.assertRaises(PersistenceError) as ctx:
            with persistence_guard('save record'):
                raise DatabaseError('disk I/O error')
        self.assertEqual(ctx.exception.message, 'Failed to save record.')
        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)

    def test_persistence_guard_lets_service_errors_through(self):
        with self.assertRaises(ValidationError):
            with persistence_guard('save record'):
                raise ValidationError('bad input')
