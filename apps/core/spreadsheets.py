"""
Reading and writing the CSV/Excel files used by the bulk import and export endpoints.
"""

import csv
import io
import zipfile

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from .exceptions import ValidationError


def normalize_header(value):
    """Lowercase a column title and replace spaces and dashes with underscores."""
    return str(value or '').strip().lower().replace(' ', '_').replace('-', '_')


def read_rows(uploaded_file, required_columns=()):
    """
    Read an uploaded CSV or Excel file into a list of dicts keyed by normalized
    column name. Every value is returned as a stripped string.
    """
    name = (getattr(uploaded_file, 'name', '') or '').lower()
    if name.endswith('.csv'):
        rows = _read_csv(uploaded_file)
    elif name.endswith(('.xlsx', '.xlsm')):
        rows = _read_excel(uploaded_file)
    else:
        raise ValidationError('Unsupported file format. Please upload a CSV or Excel file.')

    if not rows:
        return []

    header = [normalize_header(column) for column in rows[0]]
    missing_columns = [column for column in required_columns if column not in header]
    if missing_columns:
        raise ValidationError(f"Missing required columns: {', '.join(missing_columns)}")

    records = []
    for values in rows[1:]:
        if not any(str(value or '').strip() for value in values):
            continue
        record = {}
        for column, value in zip(header, values):
            record[column] = _cell_to_str(value)
        records.append(record)
    return records


def _read_csv(uploaded_file):
    content = uploaded_file.read()
    if isinstance(content, bytes):
        content = _decode(content)
    return list(csv.reader(io.StringIO(content)))


def _decode(content):
    # Excel saves "CSV" as Windows-1252 unless UTF-8 is chosen explicitly
    for encoding in ('utf-8-sig', 'cp1252'):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise ValidationError('Could not read the uploaded file. Please save it as UTF-8 CSV and try again.')


def _read_excel(uploaded_file):
    try:
        workbook = openpyxl.load_workbook(uploaded_file, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as exc:
        raise ValidationError('Could not read the uploaded Excel file. Please check it is a valid .xlsx file.') from exc
    try:
        sheet = workbook.active
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _cell_to_str(value):
    if value is None:
        return ''
    if hasattr(value, 'date') and callable(value.date):
        value = value.date()
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def write_csv(field_titles, rows):
    """Render rows as CSV text with a header line."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(field_titles)
    for row in rows:
        writer.writerow(['' if value is None else value for value in row])
    return output.getvalue()
